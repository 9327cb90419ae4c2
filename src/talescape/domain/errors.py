"""Domain-level exceptions."""


class NarrativeError(Exception):
    """Base class for every error raised by the narrative engine."""


class UnknownStatError(NarrativeError):
    """Raised when a stat name is not one of the recognised player stats."""

    def __init__(self, stat_name: str) -> None:
        super().__init__(f"Unknown stat: {stat_name}")
        self.stat_name = stat_name
