import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, new_id, utcnow


class RunStatus(str, enum.Enum):
    active = "active"
    won = "won"
    lost = "lost"
    abandoned = "abandoned"


class Run(Base):
    """One player's roguelike attempt.

    wins and losses go up as the run's battles are finalized.  stage and status
    are advanced by the run tracker; matchmaking only reads them.
    """

    __tablename__ = "runs"
    __table_args__ = (Index("ix_runs_player_id_status", "player_id", "status"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    player_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    stage: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    losses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[RunStatus] = mapped_column(
        Enum(RunStatus), nullable=False, default=RunStatus.active
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
