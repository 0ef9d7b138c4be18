from typing import Annotated, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException, Query, Request

from errors import InvalidTimezone
from repository import QuestionStore
from stats import StatisticsEngine, resolve_timezone


def get_store(request: Request) -> QuestionStore:
    return request.app.state.store


def get_stats(request: Request) -> StatisticsEngine:
    return request.app.state.stats


def timezone_param(
    timezone: Annotated[
        Optional[str],
        Query(max_length=64, description="IANA zone such as Asia/Shanghai; server default if omitted"),
    ] = None,
) -> str:
    """
    Validation boundary for timezone names. Unknown zones are rejected with 422
    before any statistics query runs.
    """
    try:
        tz: ZoneInfo = resolve_timezone(timezone)
    except InvalidTimezone as e:
        raise HTTPException(status_code=422, detail=str(e))
    return tz.key
