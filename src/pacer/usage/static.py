"""PACER Static Usage Source - fixed usage for offline runs."""

from .base import UsageSource


class StaticUsageSource(UsageSource):
    """Reports a fixed usage figure."""

    name = "static"

    def __init__(self, used_units: float, username: str = "local"):
        self.used_units = used_units
        self.username = username

    def fetch_username(self) -> str:
        return self.username

    def fetch_used_units(self, username: str) -> float:
        return self.used_units
