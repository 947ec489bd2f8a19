from marshmallow import Schema, fields, validate, pre_load
from models import SkillRatingStatus
from schemas.employee import EmployeeProfileSchema

class SkillSchema(Schema):
    id = fields.Integer(dump_only=True)
    name = fields.String(dump_only=True)
    description = fields.String(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)

class SkillCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)

class EmployeeSkillSchema(Schema):
    id = fields.Integer(dump_only=True)
    employee_id = fields.Integer(dump_only=True)
    employee = fields.Nested(EmployeeProfileSchema, only=('id', 'fullname', 'user'), dump_only=True)
    skill_id = fields.Integer(dump_only=True)
    skill = fields.Nested(SkillSchema, only=('id', 'name', 'description'), dump_only=True)
    self_rating = fields.Integer(dump_only=True)
    approved_rating = fields.Integer(dump_only=True, allow_none=True)
    status = fields.Enum(SkillRatingStatus, dump_only=True)
    reviewed_by = fields.Integer(dump_only=True, allow_none=True)
    reviewed_at = fields.DateTime(dump_only=True, allow_none=True)
    review_comment = fields.String(dump_only=True, allow_none=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)

# Rating ranges are checked by the rating workflow
class SelfRatingCreateSchema(Schema):
    skill_id = fields.Integer(required=True, strict=True)
    self_rating = fields.Integer(required=True, strict=True)

class SelfRatingUpdateSchema(Schema):
    self_rating = fields.Integer(required=True, strict=True)

class RatingReviewSchema(Schema):
    action = fields.String(required=True, validate=validate.OneOf(['APPROVE', 'EDIT', 'REJECT']))
    approved_rating = fields.Integer(strict=True, allow_none=True)
    review_comment = fields.String(allow_none=True)

    @pre_load
    def normalize_action(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('action'), str):
            data = dict(data, action=data['action'].upper())
        return data
