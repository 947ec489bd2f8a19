from app import db
from models import EmployeeProfile
from utils.errors import NotFoundError


def lock_row(model, row_id, label=None):
    """Load a row with SELECT ... FOR UPDATE, raising NotFoundError when absent."""
    # populate_existing so an object already in the session reflects the locked row
    row = (
        db.session.execute(
            db.select(model)
            .where(model.id == row_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalars()
        .first()
    )
    if row is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return row


def get_or_404(model, row_id, label=None):
    row = db.session.get(model, row_id)
    if row is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return row


def get_profile_for_user(user_id, label="Employee profile"):
    profile = EmployeeProfile.query.filter_by(user_id=user_id).first()
    if profile is None:
        raise NotFoundError(f"{label} not found")
    return profile
