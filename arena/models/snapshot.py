"""Snapshot model: a frozen copy of a player's team at a point in their run."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, new_id, utcnow


class Snapshot(Base):
    """Immutable opponent record used for asynchronous PvP.

    team holds a TeamSnapshot payload: {"units": [{"unitId", "tier", "position": {"x", "y"}}]}.
    Rows are removed together with their run; battles that fought them keep
    their row and lose the reference (see Battle.enemy_snapshot_id).
    """

    __tablename__ = "snapshots"
    __table_args__ = (Index("ix_snapshots_stage_wins", "stage", "wins"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    run_id: Mapped[str] = mapped_column(
        ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    stage: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    wins: Mapped[int] = mapped_column(Integer, nullable=False)
    team: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
