import datetime
from typing import Callable, NamedTuple

from time_liar.offsets import OffsetSpec


class CalendarTime(NamedTuple):
    """
    Broken-down local time. Fields are plain integers and may be out of
    their calendar range after adjustment (e.g. day 45 or hour -3).
    utc_offset is the local zone's offset from UTC in seconds.
    """
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    utc_offset: int = 0

    @classmethod
    def from_datetime(cls, dt: datetime.datetime) -> 'CalendarTime':
        offset = dt.utcoffset()
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
                   int(offset.total_seconds()) if offset is not None else 0)


Clock = Callable[[], CalendarTime]


def local_now() -> CalendarTime:
    return CalendarTime.from_datetime(datetime.datetime.now().astimezone())


def apply(spec: OffsetSpec, now: CalendarTime) -> CalendarTime:
    """
    Apply every field adjustment of spec to now, each field on its own.
    No carrying between fields happens here.
    :param spec: offsets for the client
    :param now: current local time
    :return: new CalendarTime with the same utc_offset
    """
    return now._replace(
        year=spec.year.apply(now.year),
        month=spec.month.apply(now.month),
        day=spec.day.apply(now.day),
        hour=spec.hour.apply(now.hour),
        minute=spec.minute.apply(now.minute),
        second=spec.second.apply(now.second),
    )
