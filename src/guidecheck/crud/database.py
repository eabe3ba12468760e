"""Engine construction and schema setup; the URL comes from Settings.db_url"""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

# Register tables on SQLModel.metadata before create_all.
from guidecheck.crud import models  # noqa: F401


def make_engine(db_url: str) -> Engine:
    return create_engine(db_url, echo=False)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)
