"""Domain errors raised by the matchmaking services.

Routers translate these into HTTP responses.
"""


class ArenaError(Exception):
    """Base class for every error the engine raises on purpose."""


class InvalidTeamComposition(ArenaError, ValueError):
    """A submitted team breaks one or more composition rules."""

    def __init__(self, violations: list[str]):
        self.violations = list(violations)
        super().__init__("Invalid team composition: " + "; ".join(self.violations))


class NoEligibleOpponent(ArenaError):
    """No snapshot and no in-band bot team exists for the run's stage.

    Every stage is expected to be provisioned with bot teams for every win
    band, so this points at missing content rather than bad input.
    """

    def __init__(self, stage: int, wins: int):
        self.stage = stage
        self.wins = wins
        super().__init__(f"No eligible opponent for stage {stage} with {wins} wins")


class UnknownRun(ArenaError, LookupError):
    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Run {run_id} not found")


class UnknownSnapshot(ArenaError, LookupError):
    def __init__(self, snapshot_id: str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Snapshot {snapshot_id} not found")


class UnknownBattle(ArenaError, LookupError):
    def __init__(self, battle_id: str):
        self.battle_id = battle_id
        super().__init__(f"Battle {battle_id} not found")


class BattleAlreadyResolved(ArenaError):
    def __init__(self, battle_id: str, result: str):
        self.battle_id = battle_id
        self.result = result
        super().__init__(f"Battle {battle_id} is already resolved ({result})")


class BattleInProgress(ArenaError):
    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Run {run_id} already has a pending battle")


class BattleNotResolved(ArenaError):
    def __init__(self, battle_id: str):
        self.battle_id = battle_id
        super().__init__(f"Battle {battle_id} has not been resolved yet")


class SimulatorFailure(ArenaError):
    """The simulator raised, timed out or returned an unusable verdict.

    The battle is left pending; retrying the resolution is safe.
    """

    def __init__(self, battle_id: str, reason: str):
        self.battle_id = battle_id
        self.reason = reason
        super().__init__(f"Simulator failed for battle {battle_id}: {reason}")


class IneligibleOpponent(ArenaError, ValueError):
    """The chosen snapshot cannot be fought by this run.

    A run never fights its own player's snapshots, nor snapshots from another
    stage.
    """

    def __init__(self, snapshot_id: str, reason: str):
        self.snapshot_id = snapshot_id
        self.reason = reason
        super().__init__(f"Snapshot {snapshot_id} is not an eligible opponent: {reason}")
