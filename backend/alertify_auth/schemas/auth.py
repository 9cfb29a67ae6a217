"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"
# At least one uppercase letter and one digit.
PASSWORD_PATTERN = r"^(?=.*[A-Z])(?=.*\d).+$"


class _Base(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_Base):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    username = fields.String(
        required=True,
        validate=[
            validate.Length(min=4, max=20),
            validate.Regexp(USERNAME_PATTERN, error="Username must be alphanumeric."),
        ],
    )
    password = fields.String(
        required=True,
        validate=[
            validate.Length(min=8, max=128),
            validate.Regexp(
                PASSWORD_PATTERN,
                error="Password must contain an uppercase letter and a digit.",
            ),
        ],
    )


class LoginSchema(_Base):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(_Base):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(_Base):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class UserPublicSchema(Schema):
    """Public projection of a user."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    username = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)


class LoginResponseSchema(Schema):
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    user = fields.Nested(UserPublicSchema, required=True)


class TokenPairSchema(Schema):
    """Response payload containing a rotated token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class WhoAmISchema(Schema):
    """Identity carried by the verified access token."""

    id = fields.Integer(required=True)
    email = fields.String(required=True)
    roles = fields.List(fields.String(), required=True)
