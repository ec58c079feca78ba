# app/db/init_db.py
import logging

from app.db.base import Base, engine

logger = logging.getLogger(__name__)


def import_models():
    # registers every mapped class on Base.metadata
    from app.db.models import user, provider, category, service, service_request, quote, booking, review  # noqa: F401


def init_db(bind=None):
    import_models()
    Base.metadata.create_all(bind=bind or engine)
    logger.info("database schema ready")
