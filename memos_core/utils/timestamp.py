"""Unix epoch timestamp utilities.

Rows store created_ts/updated_ts as integer seconds since the epoch, the
same value SQLite's strftime('%s', 'now') default produces.
"""

from datetime import datetime, UTC


def now() -> int:
    """Get current UTC time as integer epoch seconds."""
    return int(datetime.now(UTC).timestamp())
