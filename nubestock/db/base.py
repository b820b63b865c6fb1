"""
Declarative base for all models.

Every table lives in the ``nubestock`` schema of the existing database.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

SCHEMA = "nubestock"


class Base(DeclarativeBase):
    """Base class for ORM models."""

    metadata = MetaData(schema=SCHEMA)
