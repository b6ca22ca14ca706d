from datetime import UTC, datetime


def _utc_now() -> datetime:
    """Timezone-aware current time used as the default for timestamp fields."""
    return datetime.now(UTC)
