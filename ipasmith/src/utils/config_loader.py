import os
from pathlib import Path
import toml
from typing import Dict, Any, List, Optional


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    env_path = os.environ.get("IPASMITH_CONFIG")
    if env_path:
        return Path(env_path)
    return Path.home() / ".ipasmith" / "config.toml"


def load_config() -> Dict[str, Any]:
    """Load configuration from TOML file."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        return toml.load(config_path)
    except Exception as e:
        raise ValueError(f"Failed to load config {config_path}: {e}")


def get_team_id() -> Optional[str]:
    """Get the default team identifier from environment or config."""
    env_team_id = os.environ.get("IPASMITH_TEAM_ID")
    if env_team_id:
        return env_team_id

    return load_config().get("signing", {}).get("team_id")


def get_keychain_path() -> Optional[str]:
    env_keychain = os.environ.get("IPASMITH_KEYCHAIN")
    if env_keychain:
        return env_keychain

    return load_config().get("signing", {}).get("keychain_path")


def get_scheme(default: str = "ExpoKitApp") -> str:
    return load_config().get("signing", {}).get("scheme") or default


def get_fastlane_credentials(team_id: Optional[str] = None) -> Dict[str, Optional[str]]:
    """Get the credentials handed to fastlane.

    FASTLANE_PASSWORD in the environment wins over the config file.
    """
    fastlane_config = load_config().get("fastlane", {})

    return {
        "team_id": team_id or get_team_id(),
        "password": os.environ.get("FASTLANE_PASSWORD")
        or fastlane_config.get("apple_id_password"),
    }


def _key_list(section: Dict[str, Any], name: str) -> List[str]:
    value = section.get(name, [])
    if not isinstance(value, list) or not all(isinstance(k, str) for k in value):
        raise ValueError(f"[entitlements] {name} must be a list of strings")
    return value


def get_entitlement_overrides() -> Dict[str, List[str]]:
    """Extra transfer rule and blacklist keys from the [entitlements] section."""
    section = load_config().get("entitlements", {})
    return {
        "extra_transfer_rules": _key_list(section, "extra_transfer_rules"),
        "extra_blacklist": _key_list(section, "extra_blacklist"),
    }
