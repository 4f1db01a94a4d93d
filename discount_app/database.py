from sqlmodel import SQLModel, create_engine, Session
from discount_app.config import settings


def _connect_args(url: str) -> dict:
    # sqlite connections are shared with the threadpool FastAPI runs sync routes on
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,      # checks dead connections
    pool_recycle=1800,       # refresh every 30 min
    connect_args=_connect_args(settings.database_url),
)


def create_db_and_tables():
    from discount_app.models import discount, analytics
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
