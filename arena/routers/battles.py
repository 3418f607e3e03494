from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from arena.database import get_db
from arena.errors import (
    BattleAlreadyResolved,
    BattleNotResolved,
    InvalidTeamComposition,
    SimulatorFailure,
    UnknownBattle,
)
from arena.routers.errors import conflict, invalid_team, not_found
from arena.schemas.battle import BattleResponse, ReplayVerificationResponse
from arena.schemas.team import TeamSetup
from arena.services.battle_service import (
    battle_summary,
    get_battle,
    get_battle_or_raise,
    resolve_battle_outcome,
    verify_battle_replay,
)
from arena.services.team_validator import ensure_valid_team, team_setup_to_snapshot

router = APIRouter(prefix="/battles", tags=["battles"])


def _simulator_failed(e: SimulatorFailure) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/{battle_id}", response_model=BattleResponse)
async def get_battle_endpoint(battle_id: str, db: AsyncSession = Depends(get_db)):
    battle = await get_battle(db, battle_id)
    if battle is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Battle not found")
    return battle_summary(battle)


@router.post("/{battle_id}/resolve", response_model=BattleResponse)
async def resolve_battle_endpoint(battle_id: str, body: TeamSetup, db: AsyncSession = Depends(get_db)):
    """Simulate a pending battle with the submitted player team and record the verdict.

    A simulator failure leaves the battle pending, so the call can be retried.
    """
    try:
        await get_battle_or_raise(db, battle_id)
        ensure_valid_team(body)
        battle = await resolve_battle_outcome(db, battle_id, team_setup_to_snapshot(body))
    except UnknownBattle as e:
        raise not_found(e)
    except BattleAlreadyResolved as e:
        raise conflict(e)
    except InvalidTeamComposition as e:
        raise invalid_team(e)
    except SimulatorFailure as e:
        raise _simulator_failed(e)
    return battle_summary(battle)


@router.get("/{battle_id}/verify", response_model=ReplayVerificationResponse)
async def verify_battle_endpoint(battle_id: str, db: AsyncSession = Depends(get_db)):
    """Re-simulate a finished battle and report whether it reproduces the stored record."""
    try:
        matches = await verify_battle_replay(db, battle_id)
    except UnknownBattle as e:
        raise not_found(e)
    except BattleNotResolved as e:
        raise conflict(e)
    except SimulatorFailure as e:
        raise _simulator_failed(e)
    return ReplayVerificationResponse(battle_id=battle_id, matches=matches)
