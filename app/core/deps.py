from datetime import date
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status

from app.core.config import settings
from app.db.session import get_db
from app.services.maintenance_intervals import Season, parse_season


def get_today() -> date:
    """Reference date for schedule computation; overridden in tests."""
    return date.today()


def resolve_season(value: Optional[str], fallback: Optional[str] = None) -> Season:
    """Query/body season, else the project's configured season, else the app default."""
    try:
        return parse_season(value or fallback or settings.DEFAULT_SEASON_MODE)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))


Today = Annotated[date, Depends(get_today)]

__all__ = ["Today", "get_db", "get_today", "resolve_season"]
