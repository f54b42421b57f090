"""Configuration management for drivepay.

Configuration is split into two files:

1. settings.json - Machine-specific, ephemeral settings
   - data_dir: where timesheet buckets are stored (optional)
   - show_tips: include tips in totals by default (default true)
   - profile: path to profile.yaml (optional, if not colocated)

2. profile.yaml - The driver's personal configuration
   - driver: display name
   - rates: overrides for the per-unit money amounts

Config directory resolution:
1. DRIVEPAY_CONFIG_PATH environment variable (if set)
2. ~/.config/drivepay/ (XDG_CONFIG_HOME fallback)

Data directory resolution:
1. settings.json "data_dir" key (if set via CLI)
2. XDG_DATA_HOME/drivepay/ or ~/.local/share/drivepay/
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .schemas import Rates
from .store import JsonFileMonthStore


APP_NAME = "drivepay"
SETTINGS_FILENAME = "settings.json"
PROFILE_FILENAME = "profile.yaml"
TIMESHEETS_DIRNAME = "timesheets"


class ProfileNotFoundError(Exception):
    """Raised when no profile is found."""
    pass


class ProfileError(Exception):
    """Raised when the profile exists but holds invalid values."""
    pass


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Resolution order:
    1. DRIVEPAY_CONFIG_PATH environment variable
    2. ~/.config/drivepay/ (XDG_CONFIG_HOME)

    Returns:
        Path to the configuration directory
    """
    env_path = os.environ.get("DRIVEPAY_CONFIG_PATH")
    if env_path:
        return Path(env_path)

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg_config_home) / APP_NAME


def get_settings_path() -> Path:
    """Get the path to settings.json (may not exist yet)."""
    return get_config_dir() / SETTINGS_FILENAME


def load_settings() -> dict:
    """Load machine-specific settings from settings.json.

    Returns:
        Settings dictionary (empty dict if file doesn't exist)
    """
    settings_file = get_settings_path()

    if not settings_file.exists():
        return {}

    with open(settings_file, "r") as f:
        return json.load(f)


def save_settings(settings: dict) -> Path:
    """Save machine-specific settings to settings.json.

    Args:
        settings: Settings dictionary to save

    Returns:
        Path to the saved settings file
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    settings_file = config_dir / SETTINGS_FILENAME

    with open(settings_file, "w") as f:
        json.dump(settings, f, indent=2)

    return settings_file


def get_setting(key: str, default: Any = None) -> Any:
    """Get a setting value from settings.json.

    Args:
        key: Setting key (e.g., "data_dir", "show_tips")
        default: Default value if key not found

    Returns:
        Setting value or default
    """
    settings = load_settings()
    return settings.get(key, default)


def set_setting(key: str, value: Any) -> Path:
    """Set a setting value in settings.json.

    Returns:
        Path to the saved settings file
    """
    settings = load_settings()
    settings[key] = value
    return save_settings(settings)


def get_show_tips() -> bool:
    """Whether tips count toward totals unless a command says otherwise."""
    return bool(get_setting("show_tips", True))


def get_profile_path(require_exists: bool = False) -> Path:
    """Get the path to the profile.yaml file.

    Resolution order:
    1. settings.json "profile" key (if set)
    2. profile.yaml in config directory

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    custom_profile = get_setting("profile")
    if custom_profile:
        profile_path = Path(custom_profile)
        if require_exists and not profile_path.exists():
            raise ProfileNotFoundError(
                f"Profile not found at configured path: {profile_path}"
            )
        return profile_path

    profile_path = get_config_dir() / PROFILE_FILENAME
    if require_exists and not profile_path.exists():
        raise ProfileNotFoundError(
            f"No profile found at {profile_path}\n\n"
            f"A profile is optional; create one to set your name or override rates."
        )
    return profile_path


def load_profile(require_exists: bool = False) -> dict:
    """Load the driver profile from profile.yaml.

    Returns:
        Profile dictionary (empty dict if not required and not found)

    Raises:
        ProfileNotFoundError: If require_exists=True and no profile found
    """
    profile_path = get_profile_path(require_exists=require_exists)

    if not profile_path.exists():
        return {}

    with open(profile_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def save_profile(profile: dict, path: Optional[Path] = None) -> Path:
    """Save the driver profile to profile.yaml.

    Returns:
        Path to the saved profile file
    """
    if path is None:
        path = get_profile_path(require_exists=False)

    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(profile, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return path


def load_rates(profile: Optional[dict] = None) -> Rates:
    """Money rates, with any overrides from the profile's `rates` section.

    Raises:
        ProfileError: If the rates section has unknown keys or bad values
    """
    if profile is None:
        profile = load_profile(require_exists=False)

    overrides = profile.get("rates") or {}
    try:
        return Rates(**overrides)
    except (ValidationError, TypeError) as e:
        raise ProfileError(f"Invalid rates in {get_profile_path()}:\n{e}")


def get_driver_name(profile: Optional[dict] = None) -> Optional[str]:
    """Driver display name from the profile, None if not set.

    Raises:
        ProfileError: If `driver` is set to something other than text
    """
    if profile is None:
        profile = load_profile(require_exists=False)

    driver = profile.get("driver")
    if driver is None:
        return None
    if not isinstance(driver, str):
        raise ProfileError(f"Invalid driver in {get_profile_path()}: expected text, got {driver!r}")
    return driver.strip() or None


def get_data_path() -> Path:
    """Get the data directory path, created if it doesn't exist.

    Uses the data_dir setting if present, else XDG_DATA_HOME/drivepay/.
    """
    custom = get_setting("data_dir")
    if custom:
        data_path = Path(custom).expanduser()
    else:
        xdg_data_home = os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share")
        data_path = Path(xdg_data_home) / APP_NAME
    data_path.mkdir(parents=True, exist_ok=True)
    return data_path


def set_data_dir(path: str) -> Path:
    """Point the data directory at `path`, creating it if needed.

    Returns:
        The resolved data directory

    Raises:
        NotADirectoryError: If path exists and is a file
        OSError: If the directory cannot be created or written to
    """
    data_path = Path(path).expanduser().resolve()
    if data_path.exists() and not data_path.is_dir():
        raise NotADirectoryError(f"Not a directory: {data_path}")
    data_path.mkdir(parents=True, exist_ok=True)

    marker = data_path / ".drivepay-write-test"
    marker.touch()
    marker.unlink()

    set_setting("data_dir", str(data_path))
    return data_path


def clear_data_dir() -> bool:
    """Drop the data_dir setting. Returns False if it was not set."""
    settings = load_settings()
    if "data_dir" not in settings:
        return False
    del settings["data_dir"]
    save_settings(settings)
    return True


def get_timesheets_path() -> Path:
    """Directory holding the timesheet-YYYY-MM.json buckets."""
    return get_data_path() / TIMESHEETS_DIRNAME


def open_store() -> JsonFileMonthStore:
    """The file-backed bucket store in the configured data directory."""
    return JsonFileMonthStore(get_timesheets_path())
