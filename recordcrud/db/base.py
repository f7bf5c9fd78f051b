"""SQLAlchemy Declarative Base - shared base class for record models.

Invariants:
    - Record models inherit from Base (directly or through RecordMixin)
    - Base is the single source of truth for table metadata

Design Decisions:
    - Separate file for Base: models and stores import it without cycles
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for recordcrud ORM models."""
    pass
