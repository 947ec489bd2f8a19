import logging

from app import db
from models import Skill
from utils.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def create_skill(name, description=None):
    name = (name or '').strip()
    if not name:
        raise ValidationError("Skill name is required")

    if Skill.query.filter(db.func.lower(Skill.name) == name.lower()).first():
        raise ConflictError("Skill already exists")

    skill = Skill(name=name, description=description)
    db.session.add(skill)
    db.session.commit()

    logger.info("Skill %s added to catalog", skill.name)
    return skill


def list_skills():
    return Skill.query.order_by(Skill.created_at.desc(), Skill.id.desc()).all()


def find_skill_by_name(name):
    """Case-insensitive catalog lookup."""
    return Skill.query.filter(db.func.lower(Skill.name) == name.strip().lower()).first()
