from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String, Integer, Float, DateTime, Text, ForeignKey, CheckConstraint, Index
)
from .database import Base
from .utils.ids import new_id


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# ----------------------------
# Tracked resources
# ----------------------------
class Resource(Base):
    __tablename__ = "resources"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(128), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    image_url: Mapped[Optional[str]] = mapped_column(String(512))
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    target_quantity: Mapped[Optional[int]] = mapped_column(Integer)      # null or <= 0 -> no target
    multiplier: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    last_updated_by: Mapped[Optional[str]] = mapped_column(String(128))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_resources_quantity_non_negative"),
    )
    __mapper_args__ = {"version_id_col": version}

# ----------------------------
# Quantity audit trail (append-only)
# ----------------------------
class ResourceHistory(Base):
    __tablename__ = "resource_history"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    resource_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("resources.id"), nullable=False, index=True
    )
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    new_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    change_amount: Mapped[int] = mapped_column(Integer, nullable=False)  # signed
    change_type: Mapped[str] = mapped_column(String(16), nullable=False)  # absolute|relative
    updated_by: Mapped[str] = mapped_column(String(128), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

Index("ix_resource_history_resource_created", ResourceHistory.resource_id, ResourceHistory.created_at)

# ----------------------------
# Leaderboard running totals (written by Celery)
# ----------------------------
class LeaderboardEntry(Base):
    __tablename__ = "leaderboard_entries"

    actor_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    actions_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
