from marshmallow import Schema, fields, EXCLUDE

class ProposedSkillSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    skill_name = fields.String(required=True)
    weight = fields.Float(required=True)

class DeliverableProposalSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True)
    description = fields.String(allow_none=True)
    skills = fields.List(fields.Nested(ProposedSkillSchema), load_default=list)
