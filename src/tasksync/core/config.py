"""Configuration management for the task sync."""

import os
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PLACEHOLDER_VALUES = {"", "dummy", "changeme"}

DEFAULT_CLICKUP_BASE_URL = "https://api.clickup.com/api/v2"
DEFAULT_MOTION_BASE_URL = "https://api.usemotion.com/v1"


def setup_logging(level: str = "INFO") -> None:
    """Set up logging configuration.
    
    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def load_environment(env_file: Optional[str] = None) -> None:
    """Load environment variables from .env file.
    
    Args:
        env_file: Path to .env file. If None, looks for .env in current directory.
    """
    env_path = Path(env_file) if env_file else Path('.env')
    
    if env_path.exists():
        load_dotenv(env_path)
        logger.info(f"Loaded environment from {env_path}")
    else:
        logger.debug(f"No .env file found at {env_path}")


def get_required_env(key: str) -> str:
    """Get a required environment variable.
    
    Raises:
        ConfigurationError: If the variable is unset or still a placeholder
    """
    value = os.getenv(key, "")
    if value.strip().lower() in PLACEHOLDER_VALUES:
        raise ConfigurationError(f"{key} is not set or is still a placeholder value")
    return value


def get_optional_env(key: str, default: str = "") -> str:
    """Get an optional environment variable."""
    return os.getenv(key, default)


def _env_flag(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class AppSettings(BaseModel):
    """Runtime settings for one sync run."""
    clickup_api_key: str
    motion_api_key: str
    clickup_base_url: str = DEFAULT_CLICKUP_BASE_URL
    motion_base_url: str = DEFAULT_MOTION_BASE_URL

    # Field transformer policy
    clickup_done_status: str = "complete"
    motion_auto_schedule: bool = True
    motion_schedule_name: str = "Work Hours"
    motion_deadline_type: str = "SOFT"

    # Google Cloud
    google_cloud_project: Optional[str] = None
    google_cloud_region: str = "us-central1"
    api_base_url: str = "http://localhost:8000"
    sync_schedule: str = "*/10 * * * *"


def _resolve_api_keys(project_id: Optional[str]) -> None:
    """Fill missing API keys from Secret Manager when a project is configured."""
    missing = [
        key for key in ("CLICKUP_API_KEY", "MOTION_API_KEY")
        if os.getenv(key, "").strip().lower() in PLACEHOLDER_VALUES
    ]
    if not missing or not project_id:
        return

    from ..services.secrets import SecretManagerService

    for key, value in SecretManagerService(project_id=project_id).get_api_keys(missing).items():
        os.environ[key] = value


def load_settings() -> AppSettings:
    """Build settings from the environment.

    Raises:
        ConfigurationError: If an API key is missing or still a placeholder
    """
    project_id = os.getenv("GOOGLE_CLOUD_PROJECT") or None
    _resolve_api_keys(project_id)

    return AppSettings(
        clickup_api_key=get_required_env("CLICKUP_API_KEY"),
        motion_api_key=get_required_env("MOTION_API_KEY"),
        clickup_base_url=get_optional_env("CLICKUP_BASE_URL", DEFAULT_CLICKUP_BASE_URL),
        motion_base_url=get_optional_env("MOTION_BASE_URL", DEFAULT_MOTION_BASE_URL),
        clickup_done_status=get_optional_env("CLICKUP_DONE_STATUS", "complete"),
        motion_auto_schedule=_env_flag("MOTION_AUTO_SCHEDULE", True),
        motion_schedule_name=get_optional_env("MOTION_SCHEDULE_NAME", "Work Hours"),
        motion_deadline_type=get_optional_env("MOTION_DEADLINE_TYPE", "SOFT"),
        google_cloud_project=project_id,
        google_cloud_region=get_optional_env("GOOGLE_CLOUD_REGION", "us-central1"),
        api_base_url=get_optional_env("API_BASE_URL", "http://localhost:8000"),
        sync_schedule=get_optional_env("SYNC_SCHEDULE", "*/10 * * * *"),
    )
