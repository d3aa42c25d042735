"""
Runtime configuration read from environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

REMOTE_MODES = ("structured", "gemini", "chat")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class PipelineConfig:
    """
    Settings for ExpensePipeline and the HTTP service.

    remote_url=None disables the remote tier; every observation then goes
    straight to the local heuristic parser.
    """
    remote_url: Optional[str] = None
    remote_mode: str = "structured"
    api_key: Optional[str] = None
    model: Optional[str] = None
    remote_timeout: float = 10.0
    deadline: Optional[float] = None
    fallback_on_zero_amount: bool = False
    best_guess_min: float = 10.0
    best_guess_max: float = 100000.0
    max_workers: int = 2
    tesseract_cmd: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8000
    debug_trace: bool = False
    selected_apps: Optional[list] = field(default=None)

    def __post_init__(self):
        if self.remote_mode not in REMOTE_MODES:
            raise ValueError(f"remote_mode must be one of {REMOTE_MODES}, got {self.remote_mode!r}")
        if self.remote_timeout <= 0:
            raise ValueError("remote_timeout must be positive")
        if self.deadline is None:
            # Small margin so the HTTP timeout fires before the future deadline.
            self.deadline = self.remote_timeout + 2.0
        if self.best_guess_min > self.best_guess_max:
            raise ValueError("best_guess_min must not exceed best_guess_max")

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_url)

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        deadline = os.getenv("EXPENSE_PARSER_DEADLINE")
        apps = os.getenv("SELECTED_APPS")
        return cls(
            remote_url=os.getenv("EXPENSE_PARSER_URL") or None,
            remote_mode=os.getenv("EXPENSE_PARSER_MODE", "structured"),
            api_key=os.getenv("EXPENSE_PARSER_API_KEY") or None,
            model=os.getenv("EXPENSE_PARSER_MODEL") or None,
            remote_timeout=_env_float("EXPENSE_PARSER_TIMEOUT", 10.0),
            deadline=float(deadline) if deadline else None,
            fallback_on_zero_amount=_env_flag("EXPENSE_PARSER_FALLBACK_ON_ZERO"),
            best_guess_min=_env_float("BEST_GUESS_MIN", 10.0),
            best_guess_max=_env_float("BEST_GUESS_MAX", 100000.0),
            max_workers=int(os.getenv("EXPENSE_PARSER_WORKERS", "2")),
            tesseract_cmd=os.getenv("TESSERACT_CMD") or None,
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug_trace=_env_flag("DEBUG_TRACE"),
            selected_apps=[a.strip() for a in apps.split(",") if a.strip()] if apps else None,
        )
