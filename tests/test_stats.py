from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from errors import InvalidDate, InvalidTimezone, InvalidWindow
from repository import Statistic
from stats import DailyStatistic, day_bounds, resolve_timezone


def test_answer_counts_on_local_day(stats, answer):
    # 07:30 on the 11th in Shanghai
    answer("2024-01-10T23:30:00+00:00")
    assert stats.daily_statistics(2024, 1, 11, "Asia/Shanghai") == DailyStatistic(date(2024, 1, 11), 1, 1)
    assert stats.daily_statistics(2024, 1, 10, "Asia/Shanghai").total == 0


def test_same_instant_different_zones(stats, answer):
    answer("2024-01-10T23:30:00+00:00")
    assert stats.daily_statistics(2024, 1, 10, "UTC").total == 1
    assert stats.daily_statistics(2024, 1, 10, "America/Los_Angeles").total == 1
    assert stats.daily_statistics(2024, 1, 10, "Asia/Shanghai").total == 0


def test_daily_statistics_mixed(stats, answer):
    answer("2024-01-10T01:00:00+00:00", correct=True)
    answer("2024-01-10T02:00:00+00:00", correct=False)
    answer("2024-01-10T23:59:59+00:00", correct=True)
    answer("2024-01-11T00:00:00+00:00", correct=True)
    day = stats.daily_statistics(2024, 1, 10, "UTC")
    assert (day.correct, day.total) == (2, 3)
    assert day.accuracy == pytest.approx(200 / 3)


@pytest.mark.parametrize("ymd", [(2023, 2, 29), (2024, 4, 31), (2024, 13, 1), (2024, 0, 10)])
def test_invalid_dates(stats, ymd):
    with pytest.raises(InvalidDate):
        stats.daily_statistics(*ymd, "UTC")


@pytest.mark.parametrize("name", ["Mars/Olympus_Mons", "../etc/passwd", "   "])
def test_invalid_timezone(stats, name):
    with pytest.raises(InvalidTimezone):
        stats.today_statistics(name)


def test_resolve_default_timezone():
    assert resolve_timezone(None).key == "UTC"
    assert resolve_timezone("Asia/Shanghai") == ZoneInfo("Asia/Shanghai")


def test_day_bounds_follow_dst():
    start, end = day_bounds(date(2024, 3, 10), ZoneInfo("America/New_York"))
    assert start == datetime(2024, 3, 10, 5, 0, tzinfo=UTC)
    # spring forward: the local day is 23 hours long
    assert end - start == timedelta(hours=23) - timedelta(microseconds=1)


def test_today_statistics_uses_local_midnight(stats, answer, clock):
    # 23:00 on the 10th in Shanghai
    answer("2024-01-10T15:00:00+00:00", correct=True)
    # 07:30 on the 11th in Shanghai
    answer("2024-01-10T23:30:00+00:00", correct=False)

    assert stats.today_statistics("Asia/Shanghai") == Statistic(0, 1)
    assert stats.today_statistics("UTC") == Statistic(1, 2)


def test_today_statistics_ignores_the_future(stats, answer, clock):
    answer("2024-01-10T18:00:00+00:00")
    clock.set("2024-01-10T12:00:00+00:00")
    assert stats.today_statistics("UTC") == Statistic(0, 0)


def test_rolling_window(stats, answer, clock):
    answer("2024-01-08T10:00:00+00:00", correct=True)
    answer("2024-01-09T10:00:00+00:00", correct=False)
    answer("2024-01-10T10:00:00+00:00", correct=True)
    answer("2024-01-10T11:00:00+00:00", correct=True)
    clock.set("2024-01-10T20:00:00+00:00")

    rolling = stats.rolling_n_day_statistics(3, "UTC")
    assert [s.date for s in rolling.scores] == [date(2024, 1, 8), date(2024, 1, 9), date(2024, 1, 10)]
    assert [(s.correct, s.total) for s in rolling.scores] == [(1, 1), (0, 1), (2, 2)]
    assert rolling.overall == Statistic(3, 4)


def test_rolling_overall_is_sum_of_scores(stats, answer, clock):
    for i in range(10):
        answer(f"2024-01-{i + 1:02d}T22:30:00+00:00", correct=i % 3 != 0)
    clock.set("2024-01-10T23:00:00+00:00")

    for tz in ("UTC", "Asia/Shanghai", "America/New_York"):
        rolling = stats.rolling_n_day_statistics(7, tz)
        assert len(rolling.scores) == 7
        assert rolling.overall.correct == sum(s.correct for s in rolling.scores)
        assert rolling.overall.total == sum(s.total for s in rolling.scores)


def test_rolling_window_ends_on_local_today(stats, clock):
    clock.set("2024-01-10T23:30:00+00:00")
    rolling = stats.rolling_n_day_statistics(2, "Asia/Shanghai")
    assert [s.date for s in rolling.scores] == [date(2024, 1, 10), date(2024, 1, 11)]


def test_rolling_empty_window(stats, answer):
    answer("2024-01-10T10:00:00+00:00")
    rolling = stats.rolling_n_day_statistics(0, "UTC")
    assert rolling.scores == []
    assert rolling.overall == Statistic(0, 0)


@pytest.mark.parametrize("n", [-1, 2.5, True])
def test_rolling_rejects_bad_window(stats, n):
    with pytest.raises(InvalidWindow):
        stats.rolling_n_day_statistics(n, "UTC")


def test_all_daily_statistics(stats, answer, clock):
    answer("2020-06-01T10:00:00+00:00", correct=False)
    answer("2024-01-09T10:00:00+00:00", correct=True)
    answer("2024-01-09T16:30:00+00:00", correct=True)
    clock.set("2024-01-10T12:00:00+00:00")

    utc = stats.all_daily_statistics("UTC")
    assert [(s.date, s.correct, s.total) for s in utc] == [
        (date(2020, 6, 1), 0, 1),
        (date(2024, 1, 9), 2, 2),
    ]
    shanghai = stats.all_daily_statistics("Asia/Shanghai")
    assert [(s.date, s.total) for s in shanghai] == [
        (date(2020, 6, 1), 1),
        (date(2024, 1, 9), 1),
        (date(2024, 1, 10), 1),
    ]


@pytest.mark.parametrize(
    "ymd, tz",
    [((9999, 12, 31), "UTC"), ((1, 1, 1), "Asia/Shanghai")],
)
def test_dates_at_the_calendar_edges(stats, ymd, tz):
    with pytest.raises(InvalidDate):
        stats.daily_statistics(*ymd, tz)
