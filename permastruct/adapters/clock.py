from datetime import UTC, datetime, timedelta


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock frozen at one instant; advance() moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant

    def now_utc(self) -> datetime:
        return self._instant.astimezone(UTC)

    def advance(self, seconds: float) -> None:
        self._instant = self._instant + timedelta(seconds=seconds)
