from marshmallow import Schema, fields, validate, pre_load
from models import AssignmentRequestStatus
from schemas.employee import EmployeeProfileSchema
from schemas.project import ProjectSchema, DeliverableSchema

class AssignmentRequestSchema(Schema):
    id = fields.Integer(dump_only=True)
    project_id = fields.Integer(dump_only=True)
    project = fields.Nested(ProjectSchema, only=('id', 'name', 'status'), dump_only=True)
    deliverable_id = fields.Integer(dump_only=True)
    deliverable = fields.Nested(DeliverableSchema, only=('id', 'name'), dump_only=True)
    employee_id = fields.Integer(dump_only=True)
    employee = fields.Nested(EmployeeProfileSchema, only=('id', 'fullname'), dump_only=True)
    requested_by = fields.Integer(dump_only=True)
    status = fields.Enum(AssignmentRequestStatus, dump_only=True)
    reviewed_by = fields.Integer(dump_only=True, allow_none=True)
    reviewed_at = fields.DateTime(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)

class AssignmentRequestCreateSchema(Schema):
    employee_id = fields.Integer(required=True, strict=True)

class AssignmentReviewSchema(Schema):
    action = fields.String(required=True, validate=validate.OneOf(['APPROVE', 'REJECT']))

    @pre_load
    def normalize_action(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('action'), str):
            data = dict(data, action=data['action'].upper())
        return data

class AssignmentSchema(Schema):
    id = fields.Integer(dump_only=True)
    employee_id = fields.Integer(dump_only=True)
    employee = fields.Nested(EmployeeProfileSchema, only=('id', 'fullname'), dump_only=True)
    project_id = fields.Integer(dump_only=True)
    project = fields.Nested(ProjectSchema, only=('id', 'name', 'status'), dump_only=True)
    deliverable_id = fields.Integer(dump_only=True)
    deliverable = fields.Nested(DeliverableSchema, only=('id', 'name', 'description'), dump_only=True)
    assigned_at = fields.DateTime(dump_only=True)
    released_at = fields.DateTime(dump_only=True, allow_none=True)
