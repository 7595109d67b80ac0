"""Date helpers: tolerant parsing of catalog and ISO dates, epoch-ms conversions."""

from datetime import datetime, timezone
from typing import Optional

MS_PER_DAY = 24 * 60 * 60 * 1000

# Catalog release dates arrive in several shapes (ISO, store-formatted, bare year).
_RELEASE_FORMATS = (
    "%d %b, %Y",
    "%b %d, %Y",
    "%d %B, %Y",
    "%B %d, %Y",
    "%b %Y",
    "%Y",
)


def parse_date(date_str: Optional[str]) -> Optional[datetime]:
    """Parse an ISO or store-formatted date string to an aware datetime; None if unparsable."""
    if not date_str:
        return None
    text = date_str.strip()
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        dt = None
        for fmt in _RELEASE_FORMATS:
            try:
                dt = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if dt is None:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_epoch_ms(date_str: Optional[str]) -> Optional[float]:
    dt = parse_date(date_str)
    return dt.timestamp() * 1000 if dt is not None else None


def year_of(date_str: Optional[str]) -> Optional[int]:
    dt = parse_date(date_str)
    return dt.year if dt is not None else None


def year_of_ms(epoch_ms: float) -> int:
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).year


def local_hour_of_ms(epoch_ms: float) -> int:
    """Hour of day (0-23) in the host's local time."""
    return datetime.fromtimestamp(epoch_ms / 1000).hour
