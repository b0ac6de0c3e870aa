from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Register every mapped class on Base.metadata.
import tutorgrid.models  # noqa: E402,F401
