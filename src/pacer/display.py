"""PACER Status Display.

Turns a PacingResult into the status text and tooltip shown to the user.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .pacing import PacingResult, round_half_up


# What activating the status should do next
ACTION_SET_TOKEN = "set_token"
ACTION_REFRESH = "refresh"


@dataclass
class StatusDisplay:
    """One rendered status line."""

    text: str
    tooltip: str = ""
    is_error: bool = False
    action: str = ACTION_REFRESH
    result: Optional[PacingResult] = None

    @property
    def needs_token(self) -> bool:
        return self.action == ACTION_SET_TOKEN

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "text": self.text,
            "tooltip": self.tooltip,
            "is_error": self.is_error,
            "action": self.action,
        }
        if self.result is not None:
            data.update({
                "progress_bar": self.result.progress_bar,
                "zone": self.result.zone.value,
                "buffer": round(self.result.buffer, 2),
                "used_units": self.result.used_units,
                "monthly_limit": self.result.monthly_limit,
            })
        return data


def _format_limit(limit: float) -> str:
    return str(int(limit)) if float(limit).is_integer() else str(limit)


def build_tooltip(result: PacingResult) -> str:
    """Usage line plus on-track / over-budget verdict."""
    detail = f"Requests: {round_half_up(result.used_units)} / {_format_limit(result.monthly_limit)}\n"
    buffer = math.floor(result.buffer)
    if result.buffer >= 0:
        return detail + f"✅ On track. Remaining today: ~{buffer} requests."
    return detail + f"🔥 Over budget! Debt: ~{abs(buffer)} requests."


def build_status(result: PacingResult, show_zone: bool = False) -> StatusDisplay:
    """Build the status for a successful refresh."""
    text = result.progress_bar
    if show_zone:
        text = f"{text} {result.zone.value}"
    return StatusDisplay(
        text=text,
        tooltip=build_tooltip(result),
        is_error=result.is_over_budget,
        action=ACTION_REFRESH,
        result=result,
    )


def prompt_for_token(text: str, tooltip: str) -> StatusDisplay:
    return StatusDisplay(text=text, tooltip=tooltip, action=ACTION_SET_TOKEN)


def no_token_status() -> StatusDisplay:
    return prompt_for_token(
        "Pacer: No token",
        "Set GITHUB_TOKEN (or github.token) to a Personal Access Token with read:billing scope.",
    )


def token_expired_status() -> StatusDisplay:
    return prompt_for_token(
        "Pacer: Token expired",
        "Your GitHub token is invalid or revoked. Set a new one.",
    )


def error_status(message: str) -> StatusDisplay:
    return StatusDisplay(text="Pacer: Error", tooltip=message, is_error=True)
