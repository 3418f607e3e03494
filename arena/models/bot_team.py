from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from arena.models.base import Base, new_id, utcnow


class BotTeam(Base):
    """Pre-generated synthetic opponent, tagged by stage (1-9) and difficulty (1-10).

    Label, cost and appropriateness live in arena.services.bot_difficulty so the
    row stays plain data.
    """

    __tablename__ = "bot_teams"
    __table_args__ = (Index("ix_bot_teams_stage_difficulty", "stage", "difficulty"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    stage: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    team: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
