"""User-related Marshmallow schemas."""

from marshmallow import Schema, fields, validate


class UserSchema(Schema):
    """Schema for user serialization."""

    id = fields.Int(dump_only=True)
    username = fields.Str(required=True)
    created_at = fields.DateTime(dump_only=True, format="iso")


class CredentialsSchema(Schema):
    """Schema for register and login payloads."""

    username = fields.Str(required=True, validate=validate.Length(min=1, max=80))
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1))


class RegisterSchema(CredentialsSchema):
    """Schema for user registration validation."""

    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=6))


class LoginSchema(CredentialsSchema):
    """Schema for user login validation."""
