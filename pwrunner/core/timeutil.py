from datetime import datetime, timezone


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
