from arena.models.base import Base  # noqa: F401
from arena.models.battle import Battle, BattleResult  # noqa: F401
from arena.models.bot_team import BotTeam  # noqa: F401
from arena.models.run import Run, RunStatus  # noqa: F401
from arena.models.snapshot import Snapshot  # noqa: F401
