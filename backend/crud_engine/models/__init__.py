"""
SQLAlchemy ORM models.

Resources served by the engine declare their models on this Base:

    from crud_engine.models import Base

    class Book(Base):
        __tablename__ = "book"
        id: Mapped[int] = mapped_column(primary_key=True)
"""

from crud_engine.models.base import Base

__all__ = ["Base"]
