"""PACER Configuration System.

Zero-config defaults with layered overrides:
1. Built-in defaults (this file)
2. User global config (~/.config/pacer/config.json)
3. Project config (.pacer/config.json)
4. Environment variables (PACER_<SECTION>_<KEY>)
5. CLI flags
"""

import json
import math
import os
from dataclasses import dataclass, field, asdict, fields
from pathlib import Path
from typing import Optional, Dict, Any


DEFAULT_MONTHLY_LIMIT = 300

# Default configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    "usage": {
        "monthly_limit": DEFAULT_MONTHLY_LIMIT,
        "username": "",
        "sku": "copilot_premium_request",
    },
    "github": {
        "api_base": "https://api.github.com",
        "api_version": "2022-11-28",
        "timeout_seconds": 30,
        "token": "",
        "token_env": "GITHUB_TOKEN",
    },
    "refresh": {
        "interval_minutes": 10,
    },
    "display": {
        "show_zone": False,
    },
}

SECTIONS = ("usage", "github", "refresh", "display")


@dataclass
class UsageConfig:
    monthly_limit: float = DEFAULT_MONTHLY_LIMIT
    username: str = ""
    sku: str = "copilot_premium_request"  # Billing line item to count


@dataclass
class GitHubConfig:
    api_base: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    timeout_seconds: int = 30
    token: str = ""                 # Inline token (PACER_GITHUB_TOKEN); wins over token_env
    token_env: str = "GITHUB_TOKEN"  # Env var holding the token

    def resolve_token(self) -> Optional[str]:
        """Return the configured token, or None if none is available."""
        if self.token:
            return str(self.token)
        value = os.environ.get(self.token_env, "").strip() if self.token_env else ""
        return value or None


@dataclass
class RefreshConfig:
    interval_minutes: float = 10


@dataclass
class DisplayConfig:
    show_zone: bool = False


@dataclass
class Config:
    """Main PACER configuration."""

    usage: UsageConfig = field(default_factory=UsageConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    # Runtime paths (set during load)
    project_root: Optional[Path] = None
    pacer_dir: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary (excluding paths)."""
        result = {key: asdict(getattr(self, key)) for key in SECTIONS}
        # Never echo a secret
        if result["github"]["token"]:
            result["github"]["token"] = "***"
        return result

    @property
    def config_path(self) -> Path:
        return (self.pacer_dir or Path.cwd() / ".pacer") / "config.json"


def is_valid_limit(value: Any) -> bool:
    """A monthly limit must be a finite number above zero."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def _deep_merge(base: Dict, overlay: Dict) -> Dict:
    """Deep merge overlay into base, returning new dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _env_to_config_key(env_key: str) -> list:
    """Convert PACER_USAGE_MONTHLY_LIMIT to ['usage', 'monthly_limit']."""
    if not env_key.startswith("PACER_"):
        return []
    return env_key[6:].lower().split("_", 1)


def _coerce(value: str) -> Any:
    """Parse an env string as bool/int/float when possible."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    try:
        return int(value)
    except ValueError:
        try:
            return float(value)
        except ValueError:
            return value


def _apply_env_vars(config: Dict) -> Dict:
    """Apply PACER_* environment variables to config."""
    result = {k: dict(v) if isinstance(v, dict) else v for k, v in config.items()}

    for key, value in os.environ.items():
        parts = _env_to_config_key(key)
        if len(parts) < 2 or parts[0] not in SECTIONS:
            continue

        section, name = parts
        # Secrets and names stay strings
        if name in ("token", "username", "token_env", "sku", "api_base", "api_version"):
            result[section][name] = value
        else:
            result[section][name] = _coerce(value)

    return result


def _build_section(cls, data: Dict[str, Any]):
    """Build a section dataclass, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def _dict_to_config(data: Dict) -> Config:
    """Convert dictionary to Config object."""
    config = Config()

    if isinstance(data.get("usage"), dict):
        config.usage = _build_section(UsageConfig, data["usage"])
    if isinstance(data.get("github"), dict):
        config.github = _build_section(GitHubConfig, data["github"])
    if isinstance(data.get("refresh"), dict):
        config.refresh = _build_section(RefreshConfig, data["refresh"])
    if isinstance(data.get("display"), dict):
        config.display = _build_section(DisplayConfig, data["display"])

    return config


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (json.JSONDecodeError, IOError):
        return {}  # Ignore invalid config
    return data if isinstance(data, dict) else {}


def find_project_root(start: Optional[Path] = None) -> Optional[Path]:
    """Find project root by looking for .pacer or .git directory."""
    current = start or Path.cwd()

    while current != current.parent:
        if (current / ".pacer").exists():
            return current
        if (current / ".git").exists():
            return current
        current = current.parent

    return None


def load_config(
    project_root: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
    project_config_path: Optional[Path] = None,
) -> Config:
    """Load configuration with layered overrides.

    Order (later overrides earlier):
    1. Built-in defaults
    2. User global config
    3. Project config
    4. Environment variables
    """
    config_dict = DEFAULT_CONFIG.copy()

    if project_root is None:
        project_root = find_project_root()

    # User global config
    user_config = user_config_path or Path.home() / ".config" / "pacer" / "config.json"
    if user_config.exists():
        config_dict = _deep_merge(config_dict, _read_json(user_config))

    # Project config
    if project_root:
        proj_config = project_config_path or project_root / ".pacer" / "config.json"
        if proj_config.exists():
            config_dict = _deep_merge(config_dict, _read_json(proj_config))

    config_dict = _apply_env_vars(config_dict)
    config = _dict_to_config(config_dict)

    # Set runtime paths
    config.project_root = project_root or Path.cwd()
    config.pacer_dir = config.project_root / ".pacer"

    return config


def ensure_pacer_dir(config: Config) -> None:
    """Ensure .pacer directory structure exists."""
    pacer_dir = config.pacer_dir
    if pacer_dir is None:
        pacer_dir = Path.cwd() / ".pacer"

    (pacer_dir / "logs").mkdir(parents=True, exist_ok=True)

    # Create default config if missing
    config_file = pacer_dir / "config.json"
    if not config_file.exists():
        config_file.write_text(json.dumps(DEFAULT_CONFIG, indent=2))


def save_setting(config: Config, section: str, key: str, value: Any) -> None:
    """Persist one setting to the project config and apply it in memory.

    A value of None removes the key from the project config.
    """
    if section not in SECTIONS:
        raise KeyError(f"Unknown config section: {section}")
    target = getattr(config, section)
    if key not in {f.name for f in fields(target)}:
        raise KeyError(f"Unknown config key: {section}.{key}")

    config_path = config.config_path
    data = _read_json(config_path) if config_path.exists() else {}
    section_data = data.setdefault(section, {})
    if value is None:
        section_data.pop(key, None)
        default = getattr(type(target)(), key)
        setattr(target, key, default)
    else:
        section_data[key] = value
        setattr(target, key, value)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, indent=2))
