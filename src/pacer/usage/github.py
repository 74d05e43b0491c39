"""PACER GitHub Usage Source.

Reads premium-request usage from the GitHub billing usage summary:

    GET /user                                              -> login
    GET /users/{login}/settings/billing/usage/summary      -> usageItems[]

The token needs the read:billing scope.
"""

from typing import Any, Dict, Optional

import requests

from ..config import GitHubConfig
from .base import NotFoundError, TokenExpiredError, UsageSource, UsageSourceError


DEFAULT_SKU = "copilot_premium_request"


class GitHubUsageSource(UsageSource):
    """Usage source backed by the GitHub REST API."""

    name = "github"

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.github.com",
        api_version: str = "2022-11-28",
        timeout: float = 30,
        sku: str = DEFAULT_SKU,
        session: Optional[requests.Session] = None,
    ):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self.sku = sku
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, github: GitHubConfig, token: str, sku: str = DEFAULT_SKU) -> "GitHubUsageSource":
        return cls(
            token=token,
            api_base=github.api_base,
            api_version=github.api_version,
            timeout=github.timeout_seconds,
            sku=sku,
        )

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": self.api_version,
        }

    def _get_json(self, url: str) -> Any:
        """GET a URL and decode JSON, mapping HTTP errors to typed errors."""
        try:
            resp = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise UsageSourceError(f"GitHub API request failed: {e}") from e

        if resp.status_code == 401:
            raise TokenExpiredError()
        if resp.status_code == 404:
            raise NotFoundError(url)
        if not resp.ok:
            raise UsageSourceError(f"GitHub API {resp.status_code}: {url}")

        try:
            return resp.json()
        except ValueError as e:
            raise UsageSourceError(f"GitHub API returned invalid JSON: {url}") from e

    def fetch_username(self) -> str:
        """Resolve the authenticated user's login name."""
        data = self._get_json(f"{self.api_base}/user")
        login = data.get("login") if isinstance(data, dict) else None
        if not login:
            raise UsageSourceError("GitHub API response has no login")
        return login

    def fetch_used_units(self, username: str) -> float:
        """Fetch gross premium-request usage for the current billing month."""
        url = f"{self.api_base}/users/{username}/settings/billing/usage/summary"
        data = self._get_json(url)

        items = data.get("usageItems") if isinstance(data, dict) else None
        if items is None:
            return 0.0
        if not isinstance(items, list):
            raise UsageSourceError(f"GitHub API returned malformed usage: {url}")

        for item in items:
            if not isinstance(item, dict) or item.get("sku") != self.sku:
                continue
            try:
                return float(item.get("grossQuantity", 0) or 0)
            except (TypeError, ValueError) as e:
                raise UsageSourceError(f"GitHub API returned malformed usage: {url}") from e
        return 0.0
