from __future__ import annotations

import datetime as dt
from typing import List

from pydantic import BaseModel, ConfigDict


class StatisticOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    correct: int
    total: int
    # percentage, 0 when nothing was answered
    accuracy: float = 0.0


class DailyStatisticOut(StatisticOut):
    date: dt.date


class RollingStatisticsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    scores: List[DailyStatisticOut]
    overall: StatisticOut
