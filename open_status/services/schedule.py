"""営業時間の判定エンジン — 現在営業中か / 次の開店・閉店時刻 / 週間表示

I/O・時計・キャッシュに一切依存しない純関数群。
基準時刻は呼び出し側が店舗ローカル時間に変換して ScheduleQuery で渡す。
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .timeofweek import (
    TimeOfWeek, InvalidTimeError, DAY_NAMES,
    MINUTES_PER_DAY, DAYS_PER_WEEK, MINUTES_PER_WEEK,
)

logger = logging.getLogger(__name__)

CLOSES = "closes"
OPENS = "opens"

CLOSED_TEXT = "Closed"
OPEN_24_HOURS_TEXT = "Open 24 hours"
RANGE_SEP = " – "
PERIOD_SEP = ", "


class ScheduleQuery(TimeOfWeek):
    """判定の基準時刻（店舗ローカルの曜日+分）"""


@dataclass(frozen=True)
class WeeklyPeriod:
    """1つの営業区間。close が None なら閉店しない（24時間営業）"""
    open: TimeOfWeek
    close: Optional[TimeOfWeek] = None

    @property
    def open_day(self) -> int:
        return self.open.day

    @property
    def open_time(self) -> int:
        return self.open.minute

    @property
    def close_day(self) -> Optional[int]:
        return self.close.day if self.close else None

    @property
    def close_time(self) -> Optional[int]:
        return self.close.minute if self.close else None

    @property
    def span(self) -> int:
        """開店から閉店までの分数。open == close は丸1週間"""
        if self.close is None:
            return MINUTES_PER_DAY - self.open.minute
        return self.open.forward_to(self.close) or MINUTES_PER_WEEK

    def covers(self, at: TimeOfWeek) -> bool:
        """at がこの区間内か（開店時刻を含み、閉店時刻を含まない）"""
        return self.open.forward_to(at) < self.span

    def remaining(self, at: TimeOfWeek) -> int:
        """at から閉店までの分数。covers(at) が前提"""
        return self.span - self.open.forward_to(at)

    def sort_key(self):
        close = self.close.minute_of_week if self.close else -1
        return (self.open.minute_of_week, close)


@dataclass(frozen=True)
class Transition:
    """次に営業状態が切り替わる時刻"""
    kind: str
    at: TimeOfWeek
    day_offset: int
    minutes_until: int

    @property
    def at_day(self) -> int:
        return self.at.day

    @property
    def at_time(self) -> int:
        return self.at.minute


@dataclass(frozen=True)
class ScheduleResult:
    is_open_now: bool
    next_transition: Optional[Transition]
    weekday_summary: Tuple[str, ...]


# === 時刻の整形 ===

def format_clock(minute: int) -> str:
    """0時からの分 → "9:05 AM" 形式"""
    hours, minutes = divmod(minute, 60)
    suffix = "PM" if hours >= 12 else "AM"
    display = hours % 12 or 12
    return f"{display}:{minutes:02d} {suffix}"


def describe_transition(transition: Transition) -> str:
    """closesAt / opensAt 用の表示文字列

    当日: "5:00 PM"、翌日: "5:00 PM tomorrow"、それ以降: "9:00 AM Monday"
    """
    label = format_clock(transition.at_time)
    if transition.day_offset == 0:
        return label
    if transition.day_offset == 1:
        return f"{label} tomorrow"
    return f"{label} {DAY_NAMES[transition.at_day]}"


def _format_period(period: WeeklyPeriod) -> str:
    if period.close is None:
        return OPEN_24_HOURS_TEXT
    return f"{format_clock(period.open_time)}{RANGE_SEP}{format_clock(period.close_time)}"


def weekday_summary(periods: Iterable[WeeklyPeriod]) -> Tuple[str, ...]:
    """日曜始まりの7行。開店曜日でまとめ、開店時刻順に並べる"""
    ordered = _normalize(periods)
    if _is_always_open(ordered):
        return tuple(f"{name}: {OPEN_24_HOURS_TEXT}" for name in DAY_NAMES)

    lines = []
    for day, name in enumerate(DAY_NAMES):
        todays = [p for p in ordered if p.open_day == day]
        if todays:
            lines.append(f"{name}: " + PERIOD_SEP.join(_format_period(p) for p in todays))
        else:
            lines.append(f"{name}: {CLOSED_TEXT}")
    return tuple(lines)


# === 判定 ===

def _normalize(periods: Iterable[WeeklyPeriod]) -> List[WeeklyPeriod]:
    # 入力順に依存しないよう常に同じ順序に揃える（重複区間の選択も決定的になる）
    return sorted(set(periods), key=WeeklyPeriod.sort_key)


def _is_always_open(periods: List[WeeklyPeriod]) -> bool:
    """Google Places の常時営業表現: 日曜 0000 開店・close なしの1区間のみ"""
    if len(periods) != 1:
        return False
    only = periods[0]
    return only.close is None and only.open == TimeOfWeek(0, 0)


def _is_open_at(periods: List[WeeklyPeriod], at: TimeOfWeek) -> bool:
    return any(p.covers(at) for p in periods)


def _shift(at: TimeOfWeek, minutes: int) -> TimeOfWeek:
    total = (at.minute_of_week + minutes) % MINUTES_PER_WEEK
    return TimeOfWeek(*divmod(total, MINUTES_PER_DAY))


def _transition(kind: str, now: TimeOfWeek, minutes_until: int) -> Transition:
    return Transition(
        kind=kind,
        at=_shift(now, minutes_until),
        day_offset=(now.minute + minutes_until) // MINUTES_PER_DAY,
        minutes_until=minutes_until,
    )


def _next_close(periods: List[WeeklyPeriod], now: TimeOfWeek) -> Optional[Transition]:
    """営業中 → 次に実際に閉まる時刻

    閉店時刻が別区間に覆われている（連続・重複区間）場合は先へ進める。
    close なし区間だけが覆っている場合は閉店しない扱いで None。
    """
    elapsed = 0
    point = now
    while elapsed < MINUTES_PER_WEEK:
        closeable = [p for p in periods if p.close is not None and p.covers(point)]
        if not closeable:
            return None
        elapsed += min(p.remaining(point) for p in closeable)
        point = _shift(now, elapsed)
        if elapsed < MINUTES_PER_WEEK and not _is_open_at(periods, point):
            return _transition(CLOSES, now, elapsed)
    return None


def _earliest_open(periods: List[WeeklyPeriod], day: int, after: int = -1) -> Optional[WeeklyPeriod]:
    candidates = [p for p in periods if p.open_day == day and p.open_time > after]
    return min(candidates, key=WeeklyPeriod.sort_key, default=None)


def _next_open(periods: List[WeeklyPeriod], now: TimeOfWeek) -> Optional[Transition]:
    """休業中 → 次の開店時刻（最大7日先まで）"""
    # 当日のこれから開く区間
    today = _earliest_open(periods, now.day, after=now.minute)
    if today is not None:
        return _transition(OPENS, now, today.open_time - now.minute)

    # 翌日以降。offset 7 は翌週の同じ曜日（今日のより早い時刻の区間）
    for offset in range(1, DAYS_PER_WEEK + 1):
        found = _earliest_open(periods, (now.day + offset) % DAYS_PER_WEEK)
        if found is not None:
            minutes_until = offset * MINUTES_PER_DAY - now.minute + found.open_time
            return _transition(OPENS, now, minutes_until)
    return None


def resolve(periods: Iterable[WeeklyPeriod], now: ScheduleQuery) -> ScheduleResult:
    """営業区間と基準時刻から営業状態・次の切り替わり・週間表示を求める"""
    ordered = _normalize(periods)
    summary = weekday_summary(ordered)

    if _is_always_open(ordered):
        return ScheduleResult(True, None, summary)

    if _is_open_at(ordered, now):
        return ScheduleResult(True, _next_close(ordered, now), summary)
    return ScheduleResult(False, _next_open(ordered, now), summary)


# === 入力の検証（寛容モード） ===

def _parse_point(raw) -> TimeOfWeek:
    if not isinstance(raw, dict):
        raise InvalidTimeError(f"Invalid period boundary: {raw!r}")
    return TimeOfWeek.parse(raw.get("day"), raw.get("time"))


def parse_periods(raw_periods) -> List[WeeklyPeriod]:
    """Places API の opening_hours.periods を WeeklyPeriod に変換

    不正な区間は1件ずつ捨てて警告ログを出す。残りは有効として扱う。
    """
    periods = []
    for raw in raw_periods or []:
        try:
            if not isinstance(raw, dict) or "open" not in raw:
                raise InvalidTimeError(f"Period without open: {raw!r}")
            close = raw.get("close")
            periods.append(WeeklyPeriod(
                open=_parse_point(raw["open"]),
                close=_parse_point(close) if close is not None else None,
            ))
        except InvalidTimeError as e:
            logger.warning(f"Discarding malformed period: {e}")
    return periods
