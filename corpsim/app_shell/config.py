import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from corpsim.rules.loader import default_rules_path

ENV_RULES_PATH = "CORPSIM_RULES_PATH"
ENV_LOG_LEVEL = "CORPSIM_LOG_LEVEL"
ENV_TURN_WORKERS = "CORPSIM_TURN_WORKERS"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    """Process settings read from the environment."""

    rules_path: Path
    log_level: str = "INFO"
    turn_workers: int | None = None  # None: use the rules file


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{ENV_LOG_LEVEL} must be a logging level name, got {raw!r}")
    return level


def _parse_workers(raw: str) -> int:
    try:
        workers = int(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_TURN_WORKERS} must be an integer, got {raw!r}") from e
    if workers < 1:
        raise ValueError(f"{ENV_TURN_WORKERS} must be at least 1, got {workers}")
    return workers


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Read settings from the environment.

    Missing variables fall back to defaults; malformed ones raise ValueError.
    """
    env = os.environ if environ is None else environ

    rules_raw = env.get(ENV_RULES_PATH, "").strip()
    rules_path = Path(rules_raw) if rules_raw else default_rules_path()

    level_raw = env.get(ENV_LOG_LEVEL, "").strip()
    log_level = _parse_log_level(level_raw) if level_raw else "INFO"

    workers_raw = env.get(ENV_TURN_WORKERS, "").strip()
    turn_workers = _parse_workers(workers_raw) if workers_raw else None

    return Settings(rules_path=rules_path, log_level=log_level, turn_workers=turn_workers)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
