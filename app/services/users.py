import logging

from sqlalchemy.orm import Session

from app.db.base import transaction
from app.db.models.provider import Provider
from app.db.models.review import Review
from app.db.models.user import User
from app.services.reviews import recalculate_provider_rating

logger = logging.getLogger(__name__)


def delete_user(db: Session, user: User) -> None:
    """Delete a user and everything they own.

    Reviews written by the user go with their bookings, so every other
    provider they reviewed gets its rating recomputed in the same transaction.
    """
    reviewed = (
        db.query(Provider)
        .join(Review, Review.reviewee_id == Provider.user_id)
        .filter(Review.reviewer_id == user.id, Provider.user_id != user.id)
        .distinct()
        .all()
    )
    user_id = user.id

    with transaction(db):
        db.delete(user)
        # database-side cascades run here
        db.flush()
        for provider in reviewed:
            recalculate_provider_rating(db, provider)

    logger.info("user %s deleted; %d provider ratings recomputed", user_id, len(reviewed))
