import os
from pathlib import Path
import toml
from typing import Dict, Any, Optional

from ipautils.src.constants.cli_constants import DEFAULT_CONVERT_OUT, DEFAULT_RESIGN_OUT
from ipautils.src.core.errors import ConfigError

DEFAULT_TOOLS = {
    "codesign": "codesign",
    "openssl": "openssl",
    "security": "security",
}


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    env_config = os.environ.get("IPAUTILS_CONFIG")
    if env_config:
        return Path(env_config).expanduser()
    return Path.home() / ".ipautils" / "config.toml"


def load_config() -> Dict[str, Any]:
    """Load configuration from TOML file."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        return toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e


def _get_default(key: str, fallback: Optional[str]) -> Optional[str]:
    # Environment variable wins over the config file
    env_value = os.environ.get(f"IPAUTILS_{key.upper()}")
    if env_value:
        return env_value

    defaults = load_config().get("defaults", {})
    return defaults.get(key) or fallback


def get_convert_out() -> Path:
    """Default output path for the convert command."""
    return Path(_get_default("convert_out", DEFAULT_CONVERT_OUT)).expanduser()


def get_resign_out() -> Path:
    """Default output path for the resign command."""
    return Path(_get_default("resign_out", DEFAULT_RESIGN_OUT)).expanduser()


def get_entitlements_template() -> Optional[Path]:
    """User supplied entitlements template, or None for the bundled one."""
    template = _get_default("entitlements_template", None)
    return Path(template).expanduser() if template else None


def get_tool(name: str) -> str:
    """Executable used for an external tool (codesign, openssl, security)."""
    tools = load_config().get("tools", {})
    return tools.get(name) or DEFAULT_TOOLS[name]
