"""Declarative base shared by all cricket stats tables."""

from sqlalchemy import Column, Integer, DateTime, MetaData, func
from sqlalchemy.orm import declarative_base


# Constraint and index names
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class TimestampedBase:
    """Surrogate key plus creation/update timestamps on every table."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


Base = declarative_base(cls=TimestampedBase, metadata=MetaData(naming_convention=NAMING_CONVENTION))
