"""Line layout for file log entries."""

from datetime import datetime, timezone
from typing import Optional


def format_timestamp(moment: datetime, milliseconds: bool = True) -> str:
    """Format *moment* as ``YYYYMMDD-HH:MM:SS`` with an optional ``.sss`` part."""
    stamp = moment.strftime("%Y%m%d-%H:%M:%S")
    if milliseconds:
        stamp += f".{moment.microsecond // 1000:03d}"
    return stamp


def format_line(
    text: str, moment: Optional[datetime] = None, milliseconds: bool = True
) -> str:
    if moment is None:
        moment = datetime.now(timezone.utc)
    return f"{format_timestamp(moment, milliseconds)} : {text}\n"
