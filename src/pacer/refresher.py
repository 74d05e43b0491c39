"""PACER Refresher - Refresh cycle controller.

Orchestrates one refresh:
1. Resolve and validate settings (token, username, monthly limit)
2. Fetch usage, healing a stale username on 404 once
3. Calculate pacing for today
4. Build the status display

Self-healing behaviour:
- Missing token           -> prompt for a token
- Invalid monthly_limit   -> reset to the default and persist
- Missing username        -> resolve from the usage source and persist
- Unknown username (404)  -> clear, re-resolve, retry once
- Expired token (401)     -> prompt for a new token
"""

import threading
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from .config import Config, DEFAULT_MONTHLY_LIMIT, is_valid_limit, load_config, save_setting
from .display import (
    StatusDisplay,
    build_status,
    error_status,
    no_token_status,
    token_expired_status,
)
from .pacing import CalendarContext, PacingResult, calculate_pacing
from .usage import (
    GitHubUsageSource,
    NotFoundError,
    TokenExpiredError,
    UsageSource,
    UsageSourceError,
)
from .utils.logging import JsonlLogger


SourceFactory = Callable[[Config, str], UsageSource]


def github_source_factory(config: Config, token: str) -> UsageSource:
    """Default factory: the GitHub billing API."""
    return GitHubUsageSource.from_config(config.github, token, sku=config.usage.sku)


@dataclass
class ValidatedSettings:
    """Settings that passed validation for one refresh."""

    token: str
    username: str
    monthly_limit: float


class Refresher:
    """Runs refresh cycles and keeps the latest status."""

    def __init__(
        self,
        config: Optional[Config] = None,
        source_factory: Optional[SourceFactory] = None,
        today: Optional[Callable[[], date]] = None,
        logger: Optional[JsonlLogger] = None,
    ):
        self.config = config or load_config()
        self.source_factory = source_factory or github_source_factory
        self.today = today or date.today

        pacer_dir = self.config.pacer_dir or Path.cwd() / ".pacer"
        self.logger = logger or JsonlLogger(pacer_dir / "logs" / "pacer.jsonl")

        self.last_status: Optional[StatusDisplay] = None
        self._lock = threading.Lock()
        self._stop = threading.Event()

    def resolve_settings(self, source: UsageSource, token: str) -> ValidatedSettings:
        """Validate settings, correcting what can be corrected.

        Raises:
            TokenExpiredError: the token failed while resolving the username
        """
        monthly_limit = self.config.usage.monthly_limit
        if not is_valid_limit(monthly_limit):
            self.logger.log_limit_reset(monthly_limit, DEFAULT_MONTHLY_LIMIT)
            save_setting(self.config, "usage", "monthly_limit", DEFAULT_MONTHLY_LIMIT)
            monthly_limit = DEFAULT_MONTHLY_LIMIT

        username = str(self.config.usage.username or "").strip()
        if not username:
            username = self._resolve_username(source, reason="missing")

        return ValidatedSettings(token=token, username=username, monthly_limit=monthly_limit)

    def _resolve_username(self, source: UsageSource, reason: str) -> str:
        username = source.fetch_username()
        save_setting(self.config, "usage", "username", username)
        self.logger.log_username_resolved(username, reason)
        return username

    def _fetch_used_units(self, source: UsageSource, settings: ValidatedSettings) -> float:
        """Fetch usage, re-resolving a stale username once on 404."""
        try:
            return source.fetch_used_units(settings.username)
        except NotFoundError:
            save_setting(self.config, "usage", "username", None)
            settings.username = self._resolve_username(source, reason="not_found")
            return source.fetch_used_units(settings.username)

    def calendar(self) -> CalendarContext:
        return CalendarContext.for_date(self.today())

    def refresh(self) -> StatusDisplay:
        """Run one refresh cycle. Concurrent callers are serialized."""
        with self._lock:
            status = self._refresh()
            self.last_status = status
            return status

    def _refresh(self) -> StatusDisplay:
        token = self.config.github.resolve_token()
        if not token:
            return no_token_status()

        source = self.source_factory(self.config, token)
        self.logger.log_refresh_start(source.name)

        try:
            settings = self.resolve_settings(source, token)
            used_units = self._fetch_used_units(source, settings)
        except TokenExpiredError as e:
            self.logger.log_error(str(e), {"source": source.name})
            return token_expired_status()
        except UsageSourceError as e:
            self.logger.log_error(str(e), {"source": source.name})
            return error_status(str(e))
        except Exception as e:
            # Keep the watch loop alive on unexpected failures
            self.logger.log_error(str(e), {"source": source.name, "type": type(e).__name__})
            return error_status(str(e))

        result = self.calculate(used_units, settings.monthly_limit)
        self.logger.log_refresh_end(
            result.zone.value, result.buffer, result.used_units, result.monthly_limit,
        )
        return build_status(result, show_zone=self.config.display.show_zone)

    def calculate(self, used_units: float, monthly_limit: float) -> PacingResult:
        """Pacing for the injected calendar."""
        return calculate_pacing(used_units, monthly_limit, self.calendar())

    def watch(
        self,
        iterations: Optional[int] = None,
        on_update: Optional[Callable[[StatusDisplay], None]] = None,
        interval_seconds: Optional[float] = None,
    ) -> None:
        """Refresh periodically until stopped or `iterations` runs complete."""
        if interval_seconds is None:
            interval_seconds = float(self.config.refresh.interval_minutes) * 60

        count = 0
        self._stop.clear()
        while not self._stop.is_set():
            status = self.refresh()
            if on_update:
                on_update(status)

            count += 1
            if iterations is not None and count >= iterations:
                break
            self._stop.wait(interval_seconds)

    def stop(self) -> None:
        """Stop a running watch loop."""
        self._stop.set()
