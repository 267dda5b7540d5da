import json
import logging

from pydantic import BaseModel

from .config import get_config_dir, _ensure_config_dir

logger = logging.getLogger(__name__)

DEFAULT_GREETING = (
    "Hello! I'm JobSage, your AI assistant for resume analysis. I can help you "
    "find candidates, analyze skills, and answer questions about uploaded "
    "resumes. How can I help you today?"
)


class PersonaConfig(BaseModel):
    name: str = "JobSage"
    role: str = "AI Resume Assistant"
    greeting: str = DEFAULT_GREETING  # Seeded as the first message of every conversation


def _persona_file():
    return get_config_dir() / "persona.json"


def load_persona() -> PersonaConfig:
    """Load persona config from disk, falling back to defaults."""
    _ensure_config_dir()
    path = _persona_file()
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return PersonaConfig(**data)
        except Exception:
            logger.warning("Failed to load persona.json, using defaults")
    return PersonaConfig()


def save_persona(persona: PersonaConfig) -> None:
    _ensure_config_dir()
    _persona_file().write_text(
        json.dumps(persona.model_dump(), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
