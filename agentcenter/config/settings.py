import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env from the current directory so storage paths and API keys are picked up.
load_dotenv()


class Settings(BaseModel):
    """Runtime settings read from ``AGENTCENTER_*`` environment variables."""

    storage_dir: Path = Path("~/.agentcenter").expanduser()
    debug_dir: Path | None = None
    log_level: str = "WARNING"
    config_path: Path | None = None


def get_settings() -> Settings:
    """Build settings from the current environment on every call."""
    defaults = Settings()
    debug_dir = os.getenv("AGENTCENTER_DEBUG_DIR") or None
    config_path = os.getenv("AGENTCENTER_CONFIG") or None
    return Settings(
        storage_dir=Path(os.getenv("AGENTCENTER_STORAGE_DIR") or defaults.storage_dir).expanduser(),
        debug_dir=Path(debug_dir).expanduser() if debug_dir else None,
        log_level=(os.getenv("AGENTCENTER_LOG_LEVEL") or defaults.log_level).upper(),
        config_path=Path(config_path).expanduser() if config_path else None,
    )
