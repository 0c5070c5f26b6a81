"""曜日+分 の時刻値。"HHMM" 文字列と曜日番号の唯一の変換境界

曜日は 0=日曜 〜 6=土曜（Google Places と同じ並び）。
"""
from dataclasses import dataclass
from datetime import datetime

MINUTES_PER_DAY = 24 * 60
DAYS_PER_WEEK = 7
MINUTES_PER_WEEK = MINUTES_PER_DAY * DAYS_PER_WEEK

DAY_NAMES = (
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
)


class InvalidTimeError(ValueError):
    """曜日・時刻として解釈できない値"""


def parse_clock(value) -> int:
    """"HHMM" → 0時からの分。"0930" → 570"""
    if not isinstance(value, str) or len(value) != 4 or not value.isdigit():
        raise InvalidTimeError(f"Invalid clock time: {value!r}")
    hours, minutes = int(value[:2]), int(value[2:])
    # "2400" は翌日0時ではなく不正値として扱う
    if hours > 23 or minutes > 59:
        raise InvalidTimeError(f"Clock time out of range: {value!r}")
    return hours * 60 + minutes


def check_day(day) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day < DAYS_PER_WEEK:
        raise InvalidTimeError(f"Day out of range: {day!r}")
    return day


def check_minute(minute) -> int:
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute < MINUTES_PER_DAY:
        raise InvalidTimeError(f"Minute out of range: {minute!r}")
    return minute


@dataclass(frozen=True, order=True)
class TimeOfWeek:
    """週の中の一点（曜日, 0時からの分）"""
    day: int
    minute: int

    def __post_init__(self):
        check_day(self.day)
        check_minute(self.minute)

    @classmethod
    def parse(cls, day, clock) -> "TimeOfWeek":
        return cls(check_day(day), parse_clock(clock))

    @classmethod
    def from_datetime(cls, dt: datetime) -> "TimeOfWeek":
        # Python weekday(): 月=0 … 日=6 → 日=0 に揃える
        return cls((dt.weekday() + 1) % DAYS_PER_WEEK, dt.hour * 60 + dt.minute)

    @property
    def minute_of_week(self) -> int:
        return self.day * MINUTES_PER_DAY + self.minute

    def forward_to(self, other: "TimeOfWeek") -> int:
        """self から other まで前方向に進んだ分数 [0, 1週間)"""
        return (other.minute_of_week - self.minute_of_week) % MINUTES_PER_WEEK

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day]

    def __str__(self):
        return f"{self.day_name} {self.minute // 60:02d}:{self.minute % 60:02d}"
