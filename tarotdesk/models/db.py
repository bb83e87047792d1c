"""
SQLAlchemy ORM models for persistent storage.

One profile row per user holds the statistics document; its draw records
live in a child table ordered newest first.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class FortuneProfileDB(Base):
    """
    A user's fortune profile.

    Created lazily on the first successful draw and never deleted by the engine.
    """

    __tablename__ = "fortune_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)

    stats: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    achievements: Mapped[list[str]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    last_draw_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Newest first; bounded by the history cap
    draws: Mapped[list["DrawRecordDB"]] = relationship(
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by=lambda: [DrawRecordDB.timestamp.desc(), DrawRecordDB.id.desc()],
    )

    def __repr__(self) -> str:
        return f"<FortuneProfileDB(id={self.id}, user_id={self.user_id})>"


class DrawRecordDB(Base):
    """
    A single persisted draw.

    Cards are stored by value as JSON: card id, orientation, position, drawn_at.
    """

    __tablename__ = "fortune_draws"
    __table_args__ = (
        Index("ix_fortune_draws_profile_timestamp", "profile_id", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("fortune_profiles.id", ondelete="CASCADE"), index=True
    )
    draw_type: Mapped[str] = mapped_column(String(20))
    question: Mapped[str | None] = mapped_column(Text, nullable=True)

    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    interpretation: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    is_special_time: Mapped[bool] = mapped_column(Boolean, default=False)

    profile: Mapped["FortuneProfileDB"] = relationship(back_populates="draws")

    def __repr__(self) -> str:
        return f"<DrawRecordDB(type={self.draw_type}, timestamp={self.timestamp})>"
