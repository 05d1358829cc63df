from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError, EXCLUDE


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, validate=validate.Length(max=255))
    name = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if "name" in data:
                data["name"] = _strip(data["name"])
        return data

    @validates("name")
    def validate_name(self, value, **kwargs):
        if not value:
            raise ValidationError("name is required")
        if len(value) > 100:
            raise ValidationError("name must be 100 characters or less")

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data

    @validates("email")
    def validate_email(self, value, **kwargs):
        if not value:
            raise ValidationError("email is required")

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("password is required")


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, load_only=True)

    @validates("refresh_token")
    def validate_refresh_token(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("refresh_token is required")


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    name = fields.String()
    role = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class TokenPairOutSchema(Schema):
    access_token = fields.String()
    refresh_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
