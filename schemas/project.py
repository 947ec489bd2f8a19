from marshmallow import Schema, fields, validate, validates_schema, pre_load, ValidationError
from models import ProjectStatus
from schemas.skill import SkillSchema

class ProjectSchema(Schema):
    id = fields.Integer(dump_only=True)
    name = fields.String(dump_only=True)
    description = fields.String(dump_only=True, allow_none=True)
    status = fields.Enum(ProjectStatus, dump_only=True)
    start_date = fields.Date(dump_only=True, allow_none=True)
    end_date = fields.Date(dump_only=True, allow_none=True)
    deliverables_count = fields.Method('get_deliverables_count', dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)

    def get_deliverables_count(self, obj):
        return len(obj.deliverables)

class ProjectCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=150))
    description = fields.String(allow_none=True)
    start_date = fields.Date(allow_none=True)
    end_date = fields.Date(allow_none=True)

    @validates_schema
    def validate_dates(self, data, **kwargs):
        start_date = data.get('start_date')
        end_date = data.get('end_date')
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must be on or after start date", 'end_date')

class ProjectStatusUpdateSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf([ps.name for ps in ProjectStatus]))

    @pre_load
    def normalize_status(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('status'), str):
            data = dict(data, status=data['status'].upper())
        return data

class DeliverableSkillSchema(Schema):
    id = fields.Integer(dump_only=True)
    deliverable_id = fields.Integer(dump_only=True)
    skill_id = fields.Integer(dump_only=True)
    skill = fields.Nested(SkillSchema, only=('id', 'name', 'description'), dump_only=True)
    weight = fields.Float(dump_only=True)

class DeliverableSkillCreateSchema(Schema):
    skill_id = fields.Integer(required=True, strict=True)
    weight = fields.Float(required=True)

class DeliverableSkillUpdateSchema(Schema):
    weight = fields.Float(required=True)

class DeliverableSchema(Schema):
    id = fields.Integer(dump_only=True)
    project_id = fields.Integer(dump_only=True)
    project = fields.Nested(ProjectSchema, only=('id', 'name', 'status'), dump_only=True)
    name = fields.String(dump_only=True)
    description = fields.String(dump_only=True, allow_none=True)
    required_skills = fields.List(fields.Nested(DeliverableSkillSchema), dump_only=True)
    active_assignments = fields.Method('get_active_assignments', dump_only=True)
    created_at = fields.DateTime(dump_only=True)

    def get_active_assignments(self, obj):
        return [{
            "id": assignment.id,
            "employee_id": assignment.employee_id,
            "employee_name": assignment.employee.fullname,
            "assigned_at": assignment.assigned_at.isoformat(),
        } for assignment in obj.active_assignments]

class DeliverableCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)

class DeliverableUpdateSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)
