"""
SMPP Utilities Module

This module provides helper functions for the SMPP time format and for
debug output of raw protocol data.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

SMPP_TIME_PATTERN = re.compile(
    r'^(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d)(\d{2})([R+-])$'
)


@dataclass(frozen=True)
class SmppRelativeTime:
    """
    A relative SMPP time (YYMMDDhhmmss000R): an interval, not an instant.

    Years and months are kept apart from the fixed-length units because
    their duration depends on the date they are applied to.
    """

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def apply(self, start: datetime) -> datetime:
        """Return start shifted forward by this interval."""
        month_index = start.month - 1 + self.months + self.years * 12
        year = start.year + month_index // 12
        month = month_index % 12 + 1
        day = min(start.day, calendar.monthrange(year, month)[1])
        shifted = start.replace(year=year, month=month, day=day)
        return shifted + timedelta(
            days=self.days,
            hours=self.hours,
            minutes=self.minutes,
            seconds=self.seconds,
        )


def parse_smpp_time(value: str) -> Optional[Union[datetime, SmppRelativeTime]]:
    """
    Parse an SMPP time string.

    Absolute times (YYMMDDhhmmsstnnp with p '+' or '-') become timezone-aware
    datetimes; nn is the UTC offset in quarter hours. Relative times (p 'R')
    become SmppRelativeTime. The tenths-of-second digit is ignored.

    Returns:
        The parsed time, or None if value is not a valid SMPP time
    """
    match = SMPP_TIME_PATTERN.match(value)
    if match is None:
        return None

    yy, mm, dd, hh, mi, ss, _tenths, nn, p = match.groups()

    if p == 'R':
        return SmppRelativeTime(
            years=int(yy),
            months=int(mm),
            days=int(dd),
            hours=int(hh),
            minutes=int(mi),
            seconds=int(ss),
        )

    quarters = int(nn)
    offset = timedelta(hours=quarters // 4, minutes=(quarters % 4) * 15)
    if p == '-':
        offset = -offset
    try:
        return datetime(
            2000 + int(yy),
            int(mm),
            int(dd),
            int(hh),
            int(mi),
            int(ss),
            tzinfo=timezone(offset),
        )
    except ValueError:
        return None


def format_smpp_time(moment: datetime) -> str:
    """Format an aware datetime as an absolute SMPP time."""
    offset = moment.utcoffset() or timedelta(0)
    sign = '-' if offset < timedelta(0) else '+'
    quarters = int(abs(offset).total_seconds() // 900)
    return moment.strftime('%y%m%d%H%M%S') + f'0{quarters:02d}{sign}'


def format_relative_time(interval: SmppRelativeTime) -> str:
    """Format an SmppRelativeTime as a relative SMPP time."""
    return (
        f'{interval.years:02d}{interval.months:02d}{interval.days:02d}'
        f'{interval.hours:02d}{interval.minutes:02d}{interval.seconds:02d}000R'
    )


def hexdump(data: bytes, width: int = 16) -> str:
    """Render data as offset-prefixed hex lines for debug traces."""
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset : offset + width]
        hex_part = ' '.join(f'{b:02x}' for b in chunk)
        text_part = ''.join(chr(b) if 32 <= b < 127 else '.' for b in chunk)
        lines.append(f'{offset:04x}  {hex_part:<{width * 3}} {text_part}')
    return '\n'.join(lines)
