import logging

from sqlmodel import Session, SQLModel, create_engine

from copydesk.core.config import settings

logger = logging.getLogger(__name__)

engine = create_engine(settings.SQLALCHEMY_DATABASE_URI, pool_pre_ping=True)


def init_db(session: Session) -> None:
    # Tables are created from the SQLModel metadata; importing the models
    # registers them before create_all runs.
    from copydesk import models  # noqa: F401

    SQLModel.metadata.create_all(session.get_bind())
    logger.info("Database schema ready")
