from marshmallow import Schema, fields, validate, validates, ValidationError
from models import Role
from schemas.auth import UserSchema

class DepartmentSchema(Schema):
    id = fields.Integer(dump_only=True)
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    created_at = fields.DateTime(dump_only=True)

class EmployeeProfileSchema(Schema):
    id = fields.Integer(dump_only=True)
    user_id = fields.Integer(dump_only=True)
    user = fields.Nested(UserSchema, only=('id', 'email', 'role'), dump_only=True)
    fullname = fields.String(dump_only=True)
    department_id = fields.Integer(dump_only=True)
    department = fields.Nested(DepartmentSchema, only=('id', 'name'), dump_only=True)
    manager_id = fields.Integer(dump_only=True, allow_none=True)
    manager = fields.Nested(
        'EmployeeProfileSchema',
        only=('id', 'fullname'),
        dump_only=True
    )
    created_at = fields.DateTime(dump_only=True)

class EmployeeProfileCreateSchema(Schema):
    user_id = fields.Integer(required=True, strict=True)
    fullname = fields.String(required=True, validate=validate.Length(min=1, max=150))
    department_id = fields.Integer(required=True, strict=True)

class AssignManagerSchema(Schema):
    manager_id = fields.Integer(required=True, strict=True)

class ChangeRoleSchema(Schema):
    role = fields.String(required=True)

    @validates('role')
    def validate_role(self, value, **kwargs):
        try:
            Role[value.upper()]
        except KeyError:
            raise ValidationError(f"Invalid role: {value}")
