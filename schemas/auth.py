from marshmallow import Schema, fields, validate, validates, ValidationError
from models import Role

class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True)

class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    role = fields.String(required=True)

    @validates('role')
    def validate_role(self, value, **kwargs):
        try:
            Role[value.upper()]
        except KeyError:
            raise ValidationError(f"Invalid role: {value}")

class UserSchema(Schema):
    id = fields.Integer(dump_only=True)
    email = fields.Email(dump_only=True)
    role = fields.Enum(Role, dump_only=True)
    created_at = fields.DateTime(dump_only=True)
