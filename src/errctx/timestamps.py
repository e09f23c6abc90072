"""RFC3339 timestamps for the ``timestamp`` context field."""

import re
from datetime import UTC, datetime

# Returned when a node carries no usable timestamp
ZERO_TIME = datetime(1, 1, 1, tzinfo=UTC)

# fromisoformat also takes date-only and offset-less strings; RFC3339 does not
_RFC3339_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$")


def format_rfc3339(moment: datetime | None = None) -> str:
    """Format a moment as RFC3339 in UTC with second precision.

    Args:
        moment: Time to format (default: now)

    Returns:
        String such as ``2024-05-01T12:30:00Z``
    """
    if moment is None:
        moment = datetime.now(UTC)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_rfc3339(value: str) -> datetime | None:
    """Parse an RFC3339 string into an aware datetime.

    Fractions beyond microseconds are truncated.

    Returns:
        The parsed datetime, or None if the string is not valid RFC3339
    """
    candidate = value.upper()
    if not _RFC3339_SHAPE.match(candidate):
        return None
    try:
        return datetime.fromisoformat(candidate.replace("Z", "+00:00"))
    except ValueError:
        return None
