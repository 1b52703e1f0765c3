# velohub/models/base.py

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Common declarative base for every ORM model.
    Alembic discovers tables through Base.metadata.
    """
    pass
