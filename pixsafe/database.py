from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from pixsafe.config import settings


def make_engine(database_url: str):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Sessions are handed across FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
