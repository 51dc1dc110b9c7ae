from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision BSON stores."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)
