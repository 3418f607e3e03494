"""Battle model: the setup and outcome of one fight in a run."""

import enum
from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, new_id, utcnow


class BattleResult(str, enum.Enum):
    pending = "pending"
    win = "win"
    loss = "loss"


class Battle(Base):
    """One battle of a run.

    Created pending with a fixed seed; moves to win or loss exactly once.

    enemy_snapshot_id is None for bot opponents, and is set to None when the
    fought snapshot is deleted later on.  enemy_team freezes the opponent roster
    at creation so the fight can still be resolved and replayed after that.
    player_team is written together with events and result on finalization.
    events is a JSON list of simulator event dicts.
    """

    __tablename__ = "battles"
    __table_args__ = (
        # At most one in-flight battle per run
        Index(
            "uq_battles_run_id_pending",
            "run_id",
            unique=True,
            sqlite_where=text("result = 'pending'"),
            postgresql_where=text("result = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    run_id: Mapped[str] = mapped_column(
        ForeignKey("runs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    enemy_snapshot_id: Mapped[str | None] = mapped_column(
        ForeignKey("snapshots.id", ondelete="SET NULL"), nullable=True, index=True
    )
    seed: Mapped[int] = mapped_column(Integer, nullable=False)
    result: Mapped[BattleResult] = mapped_column(
        Enum(BattleResult), nullable=False, default=BattleResult.pending, index=True
    )
    events: Mapped[list | None] = mapped_column(JSON, nullable=True, default=None)
    enemy_team: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    player_team: Mapped[dict | None] = mapped_column(JSON, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
