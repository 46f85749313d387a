"""SQLAlchemy ORM models backing the persistent state."""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base
from .models import WatchStatus


class CatalogRecord(Base):
    """Canonical movie metadata, written once per external id."""

    __tablename__ = "catalog_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True
    )
    title: Mapped[str] = mapped_column(String(255), index=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    poster_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    genre: Mapped[str | None] = mapped_column(String(255), nullable=True)
    media_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    overview: Mapped[str | None] = mapped_column(Text, nullable=True)
    runtime: Mapped[str | None] = mapped_column(String(32), nullable=True)
    external_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    links: Mapped[list["UserMovieLink"]] = relationship(
        back_populates="movie", cascade="all, delete-orphan"
    )


class UserMovieLink(Base):
    """One user's status, favorite flag and rating for a catalog record."""

    __tablename__ = "user_movie_links"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "catalog_record_id", name="uq_user_movie_links_user_record"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    catalog_record_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("catalog_records.id", ondelete="CASCADE")
    )
    status: Mapped[WatchStatus | None] = mapped_column(
        Enum(WatchStatus, native_enum=False, length=32), nullable=True
    )
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    user_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    added_at: Mapped[date] = mapped_column(Date, default=date.today)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    movie: Mapped[CatalogRecord] = relationship(back_populates="links")
