"""Shared translation of domain errors into HTTP errors."""

from fastapi import HTTPException, status

from arena.errors import InvalidTeamComposition


def invalid_team(exc: InvalidTeamComposition) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": "Invalid team composition", "violations": exc.violations},
    )


def not_found(exc: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def conflict(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
