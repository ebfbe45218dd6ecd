from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_DB_FILE = 'flight_search.db'
DEFAULT_PORT = 8080


def project_root_dir() -> Path:
    # For dev runs, keep config.env next to the source files.
    return Path(__file__).resolve().parent


def _candidate_dotenv_paths() -> list[Path]:
    """Return candidate locations for config.env.

    Precedence rule (first existing file wins):
    1) next to the sources
    2) current working directory
    """
    candidates: list[Path] = []

    try:
        candidates.append(project_root_dir() / 'config.env')
    except Exception:
        pass

    try:
        candidates.append(Path.cwd() / 'config.env')
    except Exception:
        pass

    # De-dup while preserving order
    out: list[Path] = []
    seen: set[str] = set()
    for p in candidates:
        try:
            key = str(p.resolve())
        except Exception:
            key = str(p)
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def dotenv_path() -> Path:
    """Best-effort config.env locator.

    Returns the first existing candidate if available, otherwise the dev default.
    """
    for p in _candidate_dotenv_paths():
        try:
            if p.exists() and p.is_file():
                return p
        except Exception:
            continue
    return project_root_dir() / 'config.env'


def load_dotenv_once() -> Optional[Path]:
    """Load config.env if present. Real environment variables win."""
    env_path = dotenv_path()
    try:
        if not (env_path.exists() and env_path.is_file()):
            return None
        load_dotenv(dotenv_path=str(env_path), override=False)
        return env_path
    except Exception as e:
        print(f"Warning: Failed to load config.env: {e}")
        return None


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PORT
    return port if 0 < port < 65536 else DEFAULT_PORT


@dataclass(frozen=True)
class LoadedConfig:
    db_path: Path
    airports_path: Optional[Path]
    log_level: str
    port: int
    loaded_from: Optional[Path]


def load_config() -> LoadedConfig:
    """Load settings from environment variables and/or config.env.

    Keys:
      - FLIGHT_SEARCH_DB: SQLite file for favorites and preferences
      - FLIGHT_SEARCH_AIRPORTS: airport seed file (default: bundled airports.json)
      - LOG_LEVEL: logging level name (default: INFO)
      - FLIGHT_SEARCH_PORT: web UI port (default: 8080)
    """
    loaded_from = load_dotenv_once()

    db_path = (os.getenv('FLIGHT_SEARCH_DB') or '').strip() or DEFAULT_DB_FILE
    airports = (os.getenv('FLIGHT_SEARCH_AIRPORTS') or '').strip()
    log_level = (os.getenv('LOG_LEVEL') or '').strip().upper() or 'INFO'
    port = _parse_port((os.getenv('FLIGHT_SEARCH_PORT') or '').strip())

    return LoadedConfig(
        db_path=Path(db_path),
        airports_path=Path(airports) if airports else None,
        log_level=log_level,
        port=port,
        loaded_from=loaded_from,
    )


def config_diagnostics() -> str:
    """Human-readable diagnostics for config/env loading."""
    cfg = load_config()

    lines = []
    lines.append(f"CWD: {Path.cwd()}")
    lines.append(f"Resolved config.env: {dotenv_path()}")
    lines.append("Candidates searched:")
    for p in _candidate_dotenv_paths():
        try:
            exists = p.exists() and p.is_file()
        except Exception:
            exists = False
        lines.append(f"  - {p} (exists={exists})")

    lines.append(f"Loaded from: {cfg.loaded_from}")
    lines.append(f"Database: {cfg.db_path}")
    lines.append(f"Airports: {cfg.airports_path or 'bundled airports.json'}")
    lines.append(f"Log level: {cfg.log_level}")
    lines.append(f"Port: {cfg.port}")
    return "\n".join(lines)
