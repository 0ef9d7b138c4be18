from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import AwareDatetime

from deps.params import get_stats, timezone_param
from errors import InvalidDate, InvalidTimezone, InvalidWindow, StorageError
from models import as_utc
from schemas.statistics import DailyStatisticOut, RollingStatisticsOut, StatisticOut
from stats import DailyStatistic, StatisticsEngine

router = APIRouter(prefix="/api", tags=["statistics"])

# longest rolling window a client may ask for
MAX_WINDOW_DAYS = 366


def _stat(s) -> dict:
    return {"correct": s.correct, "total": s.total, "accuracy": s.accuracy}


def _daily(s: DailyStatistic) -> dict:
    return {"date": s.date, **_stat(s)}


@router.get("/statistics", response_model=StatisticOut)
def range_statistics(
    start: Optional[AwareDatetime] = None,
    end: Optional[AwareDatetime] = None,
    stats: StatisticsEngine = Depends(get_stats),
):
    # ISO-8601 with an explicit offset; naive or malformed values are a 422 from pydantic
    try:
        start = as_utc(start) if start is not None else None
        end = as_utc(end) if end is not None else None
    except OverflowError:
        raise HTTPException(status_code=422, detail="timestamp is outside the supported range")
    if start is not None and end is not None and start > end:
        raise HTTPException(status_code=422, detail="start must not be after end")
    try:
        return _stat(stats.range_statistics(start, end))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get statistics")


@router.get("/today", response_model=StatisticOut)
def today_statistics(
    timezone: str = Depends(timezone_param),
    stats: StatisticsEngine = Depends(get_stats),
):
    try:
        return _stat(stats.today_statistics(timezone))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get statistics")


@router.get("/daily", response_model=DailyStatisticOut)
def daily_statistics(
    year: int = Query(ge=1, le=9999),
    month: int = Query(ge=1, le=12),
    day: int = Query(ge=1, le=31),
    timezone: str = Depends(timezone_param),
    stats: StatisticsEngine = Depends(get_stats),
):
    try:
        return _daily(stats.daily_statistics(year, month, day, timezone))
    except (InvalidDate, InvalidTimezone) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get statistics")


@router.get("/last-n", response_model=RollingStatisticsOut)
def rolling_statistics(
    n: int = Query(default=7, ge=0, le=MAX_WINDOW_DAYS),
    timezone: str = Depends(timezone_param),
    stats: StatisticsEngine = Depends(get_stats),
):
    try:
        rolling = stats.rolling_n_day_statistics(n, timezone)
    except (InvalidWindow, InvalidTimezone) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get statistics")
    return {"scores": [_daily(s) for s in rolling.scores], "overall": _stat(rolling.overall)}


@router.get("/history", response_model=List[DailyStatisticOut])
def daily_history(
    timezone: str = Depends(timezone_param),
    stats: StatisticsEngine = Depends(get_stats),
):
    try:
        return [_daily(s) for s in stats.all_daily_statistics(timezone)]
    except StorageError:
        raise HTTPException(status_code=500, detail="Failed to get statistics")
