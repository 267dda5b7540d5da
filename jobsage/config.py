import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

# Keys double as file names in the config dir
STORAGE_KEY_PATTERN = r"^[A-Za-z0-9_.-]+$"


class ChatConfig(BaseModel):
    storage_key: str = Field(default="conversations", pattern=STORAGE_KEY_PATTERN)
    untitled_title: str = "New Conversation"  # Title of new conversations
    title_max_length: int = Field(default=30, gt=0)
    title_ellipsis: str = Field(default="...", min_length=1)
    reply_delay_seconds: float = Field(default=1.5, ge=0)  # Simulated "thinking" latency


class ResumeConfig(BaseModel):
    storage_key: str = Field(default="resumes", pattern=STORAGE_KEY_PATTERN)
    accepted_extensions: list[str] = [".pdf"]
    include_demo_resumes: bool = True
    upload_delay_seconds: float = Field(default=2.0, ge=0)


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8765
    cors_origins: list[str] = [
        "http://localhost:5173",     # Vite dev server
        "http://127.0.0.1:5173",
        "http://localhost:8765",
        "http://127.0.0.1:8765",
    ]


class AppConfig(BaseModel):
    chat: ChatConfig = ChatConfig()
    resumes: ResumeConfig = ResumeConfig()
    server: ServerConfig = ServerConfig()
    language: str = "en"


_config_dir = Path(os.environ.get("JOBSAGE_CONFIG_DIR", Path.home() / ".jobsage"))


def get_config_dir() -> Path:
    return _config_dir


def _config_file() -> Path:
    return _config_dir / "config.json"


def _ensure_config_dir() -> None:
    _config_dir.mkdir(parents=True, exist_ok=True)


def load_config() -> AppConfig:
    _ensure_config_dir()
    config_file = _config_file()
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text(encoding="utf-8"))
            return AppConfig(**data)
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            logger.warning("Failed to load config.json, using defaults: %s", e)
    return AppConfig()


def save_config(config: AppConfig) -> None:
    _ensure_config_dir()
    _config_file().write_text(config.model_dump_json(indent=2), encoding="utf-8")


_current_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    global _current_config
    if _current_config is None:
        _current_config = load_config()
    return _current_config


def update_config(config: AppConfig) -> AppConfig:
    global _current_config
    save_config(config)
    _current_config = config
    return _current_config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the file."""
    global _current_config
    _current_config = None
