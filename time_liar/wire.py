from struct import pack, unpack

from time_liar.adjust import CalendarTime

TIME_OFFSET = 2208988800  # seconds from 1900-01-01 to 1970-01-01
MASK = 0xFFFFFFFF
SIZE = 4


def days_from_civil(year: int, month: int, day: int) -> int:
    """
    Days since 1970-01-01 in the proleptic Gregorian calendar.
    Month is carried into the year first, day is taken linearly,
    so any integer fields give an answer.
    """
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    if month <= 2:
        year -= 1
    era = year // 400
    year_of_era = year - era * 400
    day_of_year = (153 * (month + (-3 if month > 2 else 9)) + 2) // 5 + day - 1
    day_of_era = year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    return era * 146097 + day_of_era - 719468


def to_unix_seconds(t: CalendarTime) -> int:
    days = days_from_civil(t.year, t.month, t.day)
    return days * 86400 + t.hour * 3600 + t.minute * 60 + t.second - t.utc_offset


def rfc868_seconds(t: CalendarTime) -> int:
    return (to_unix_seconds(t) + TIME_OFFSET) & MASK


def encode(t: CalendarTime) -> bytes:
    return pack('!I', rfc868_seconds(t))


def decode(data: bytes) -> int:
    if len(data) != SIZE:
        raise ValueError(f'RFC 868 time is {SIZE} bytes, got {len(data)}')
    return unpack('!I', data)[0]


def to_unix(value: int) -> int:
    """Unix seconds for an RFC 868 value, assuming the 1900-2036 era."""
    return value - TIME_OFFSET
