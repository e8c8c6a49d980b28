"""Server configuration.

Settings are merged from built-in defaults, an optional YAML file in the
data directory (``~/.pingcode-mcp/config.yaml``) and ``PINGCODE_*``
environment variables, later sources winning.
"""
import logging
import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel

logger = logging.getLogger("pingcode-mcp.config")

DEFAULT_DATA_DIR = Path.home() / ".pingcode-mcp"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "PINGCODE_DOMAIN": "domain",
    "PINGCODE_TIMEOUT": "timeout",
    "PINGCODE_DATA_DIR": "data_dir",
    "PINGCODE_DEFAULT_PROJECT": "default_project",
    "PINGCODE_TIMEZONE": "timezone",
    "PINGCODE_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    domain: str = "neuralgalaxy.pingcode.com"
    timeout: float = 30.0
    data_dir: Path = DEFAULT_DATA_DIR
    # Project prefix assumed for identifiers without one (e.g. "2513")
    default_project: str = "LFY"
    # IANA zone name for rendered timestamps; local time when unset
    timezone: Optional[str] = None
    log_level: str = "INFO"

    @property
    def base_url(self) -> str:
        return f"https://{self.domain}"

    @property
    def credentials_path(self) -> Path:
        return self.data_dir / "credentials.json"

    def tzinfo(self) -> Optional[tzinfo]:
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using local time")
            return None


def load_settings(env: Optional[dict] = None) -> Settings:
    """Load settings from defaults, the YAML config file and the environment.

    Args:
        env: Environment mapping to read (defaults to os.environ)

    Returns:
        Validated Settings
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}

    data_dir = Path(env.get("PINGCODE_DATA_DIR") or DEFAULT_DATA_DIR).expanduser()
    config_file = data_dir / "config.yaml"
    if config_file.exists():
        with open(config_file, "r", encoding="utf-8") as f:
            file_values = yaml.safe_load(f) or {}
        if isinstance(file_values, dict):
            values.update(file_values)
        else:
            logger.warning(f"Ignoring {config_file}: expected a mapping")

    for var, field in ENV_OVERRIDES.items():
        if env.get(var):
            values[field] = env[var]

    values["data_dir"] = Path(values.get("data_dir") or data_dir).expanduser()
    return Settings(**values)
