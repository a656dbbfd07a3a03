from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from salon_pos.config import settings

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False
    connect_args["timeout"] = 15

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


def init_db(bind=None):
    # Import all models so Base.metadata knows about them
    import salon_pos.models.product  # noqa: F401
    import salon_pos.models.product_return  # noqa: F401
    import salon_pos.models.sale  # noqa: F401
    import salon_pos.models.stock_movement  # noqa: F401
    import salon_pos.models.user  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
