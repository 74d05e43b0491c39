"""PACER Usage sources - where monthly consumption comes from."""

from .base import UsageSource, UsageSourceError, TokenExpiredError, NotFoundError
from .github import GitHubUsageSource
from .static import StaticUsageSource

__all__ = [
    "UsageSource",
    "UsageSourceError",
    "TokenExpiredError",
    "NotFoundError",
    "GitHubUsageSource",
    "StaticUsageSource",
]
