"""PACER Usage Source Base Classes.

A usage source reports how many units the account has consumed this month.
Sources raise typed errors so the refresher can heal or prompt.
"""


class UsageSourceError(Exception):
    """Usage could not be fetched."""


class TokenExpiredError(UsageSourceError):
    """The credential is invalid or has been revoked (HTTP 401)."""

    def __init__(self, message: str = "GitHub token is invalid or has been revoked (401)"):
        super().__init__(message)


class NotFoundError(UsageSourceError):
    """The requested resource (e.g. user) was not found (HTTP 404)."""

    def __init__(self, url: str):
        super().__init__(f"GitHub resource not found: {url}")
        self.url = url


class UsageSource:
    """Base class for usage sources.

    Subclasses must implement:
    - name: str - identifier used in logs
    - fetch_username() -> str
    - fetch_used_units(username) -> float
    """

    name: str = "base"

    def fetch_username(self) -> str:
        """Resolve the account name the credential belongs to."""
        raise NotImplementedError("Subclasses must implement fetch_username()")

    def fetch_used_units(self, username: str) -> float:
        """Return units consumed so far in the current month."""
        raise NotImplementedError("Subclasses must implement fetch_used_units()")
