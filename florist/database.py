from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from florist.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def import_models():
    # Import all models so Base.metadata knows about them
    import florist.models.inventory_adjustment  # noqa: F401
    import florist.models.product  # noqa: F401
    import florist.models.purchase  # noqa: F401
    import florist.models.sale  # noqa: F401
    import florist.models.supplier  # noqa: F401


def init_db():
    import_models()
    Base.metadata.create_all(bind=engine)
