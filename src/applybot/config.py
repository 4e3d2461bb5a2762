"""Paths, environment loading, and validated YAML configuration for applybot.

The app directory defaults to ~/.applybot and can be moved with APPLYBOT_DIR.
Paths are resolved at call time so tests (and the CLI) can repoint it.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import TypeVar

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError
from rich.logging import RichHandler

from applybot.errors import ConfigError
from applybot.schemas import CandidateProfile, TextResume, WorkPreferences

log = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

PREFERENCES_FILE = "preferences.yaml"
TEXT_RESUME_FILE = "text_resume.yaml"
ENV_FILE = ".env"

_LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def app_dir() -> Path:
    return Path(os.environ.get("APPLYBOT_DIR", "~/.applybot")).expanduser()


def config_dir() -> Path:
    return app_dir() / "config"


def data_dir() -> Path:
    return app_dir() / "data"


def log_dir() -> Path:
    return app_dir() / "logs"


def browser_profile_dir() -> Path:
    return app_dir() / "browser-profile"


def ensure_dirs() -> None:
    for d in (config_dir(), data_dir(), log_dir(), browser_profile_dir()):
        d.mkdir(parents=True, exist_ok=True)


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


def load_env() -> bool:
    """Load the app-dir .env (LLM keys and endpoints) without overriding real env vars."""
    env_path = app_dir() / ENV_FILE
    if not env_path.exists():
        log.debug("No .env at %s", env_path)
        return False
    return load_dotenv(env_path, override=False)


# ---------------------------------------------------------------------------
# YAML configs
# ---------------------------------------------------------------------------


def load_yaml_config(path: Path, model: type[ModelT]) -> ModelT:
    """Parse a YAML file and validate it against a pydantic model.

    Raises ConfigError for a missing file, broken YAML, or schema violations.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"{path.name} failed validation:\n{e}") from e


def load_preferences(path: Path | None = None) -> WorkPreferences:
    return load_yaml_config(path or config_dir() / PREFERENCES_FILE, WorkPreferences)


def load_text_resume(path: Path | None = None) -> TextResume:
    return load_yaml_config(path or config_dir() / TEXT_RESUME_FILE, TextResume)


def load_profile(
    preferences_path: Path | None = None,
    resume_path: Path | None = None,
) -> CandidateProfile:
    """Load and cross-check both config files into a CandidateProfile."""
    preferences = load_preferences(preferences_path)
    resume = load_text_resume(resume_path)

    resume_file = Path(preferences.resume_path).expanduser()
    if not resume_file.is_file():
        raise ConfigError(f"Resume file path doesn't exist, \"{preferences.resume_path}\"")

    return CandidateProfile(resume=resume, preferences=preferences)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logging(verbose: bool = False) -> None:
    """Rich console output plus a daily log file in the app log dir."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    console = RichHandler(rich_tracebacks=True, show_path=False)
    console.setLevel(level)
    root.addHandler(console)

    try:
        log_dir().mkdir(parents=True, exist_ok=True)
        log_file = log_dir() / f"applybot_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(fh)
    except OSError as e:
        log.warning("File logging disabled: %s", e)

    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
