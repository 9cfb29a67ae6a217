# tests/unit/policies/test_account_status.py
from __future__ import annotations

import pytest

from alertify_auth.services._shared.errors import AuthError, ErrorCode, ErrorKind
from alertify_auth.services._shared.policies.account_status import (
    AccountState,
    classify_status,
    ensure_account_enabled,
)
from tests.helpers.utils import not_raises


@pytest.mark.parametrize("status", ["active", "ACTIVE", " Active ", "activo", "Activo"])
def test_active_spellings_pass(status):
    assert classify_status(status) is AccountState.ACTIVE
    with not_raises(AuthError):
        ensure_account_enabled(status)


@pytest.mark.parametrize("status", ["blocked", "Bloqueado", " BLOCKED"])
def test_blocked_is_forbidden(status):
    with pytest.raises(AuthError) as exc:
        ensure_account_enabled(status)
    assert exc.value.kind is ErrorKind.FORBIDDEN
    assert exc.value.code == ErrorCode.ACCOUNT_BLOCKED


@pytest.mark.parametrize("status", ["inactive", "Inactivo", "pending", "", None])
def test_inactive_and_unknown_fail_closed(status):
    with pytest.raises(AuthError) as exc:
        ensure_account_enabled(status)
    assert exc.value.kind is ErrorKind.FORBIDDEN
    assert exc.value.code == ErrorCode.ACCOUNT_INACTIVE
