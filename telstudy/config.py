"""
Configuration management for TelStudy.

This module centralizes all configuration settings:
- Environment variables (optionally from a .env file)
- Sensible defaults for development
- Single source of truth for paths, quiz limits and grade bands
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Load environment variables from .env file
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    pass  # dotenv is optional


@dataclass
class QuizConfig:
    """Quiz-taking and upload limits."""

    option_count: int = 4

    # Live timer display refresh (the elapsed value itself is always exact)
    timer_refresh_ms: int = field(
        default_factory=lambda: int(os.getenv("TELSTUDY_TIMER_REFRESH_MS", "100"))
    )

    # Upload guardrails
    max_file_size_bytes: int = 5 * 1024 * 1024
    max_uploads_per_window: int = field(
        default_factory=lambda: int(os.getenv("TELSTUDY_UPLOAD_LIMIT", "10"))
    )
    upload_window_seconds: float = field(
        default_factory=lambda: float(os.getenv("TELSTUDY_UPLOAD_WINDOW", "3600"))
    )


@dataclass
class GradeConfig:
    """Letter-grade bands, keyed by inclusive lower bound."""

    a_min: float = 90.0
    b_min: float = 80.0
    c_min: float = 70.0
    d_min: float = 60.0

    def bands(self) -> list[tuple[float, str]]:
        """Bands ordered from highest to lowest lower bound."""
        return [(self.a_min, "A"), (self.b_min, "B"), (self.c_min, "C"), (self.d_min, "D")]


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    data_dir: Optional[Path] = None

    # Computed from data_dir / project_root
    question_sets_dir: Path = field(init=False)
    blobs_dir: Path = field(init=False)
    sessions_dir: Path = field(init=False)
    schemas_dir: Path = field(init=False)
    question_set_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        if self.data_dir is None:
            env_dir = os.getenv("TELSTUDY_DATA_DIR")
            self.data_dir = Path(env_dir) if env_dir else self.project_root / "data"
        self.data_dir = Path(self.data_dir)
        self.question_sets_dir = self.data_dir / "question_sets"
        self.blobs_dir = self.data_dir / "blobs"
        self.sessions_dir = self.data_dir / "sessions"
        self.schemas_dir = self.project_root / "schemas"
        self.question_set_schema = self.schemas_dir / "question_set.schema.json"

    def prepare_filesystem(self):
        """
        Create directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [self.data_dir, self.question_sets_dir, self.blobs_dir, self.sessions_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("TELSTUDY_LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from telstudy.config import config

        refresh = config.quiz.timer_refresh_ms
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.quiz = QuizConfig()
            cls._instance.grades = GradeConfig()
            cls._instance.logging = LoggingConfig()
        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.quiz.option_count != 4:
            errors.append(f"option_count must be 4, got {self.quiz.option_count}")

        if self.quiz.timer_refresh_ms <= 0:
            errors.append(f"timer_refresh_ms must be > 0, got {self.quiz.timer_refresh_ms}")

        if self.quiz.max_file_size_bytes <= 0:
            errors.append(
                f"max_file_size_bytes must be > 0, got {self.quiz.max_file_size_bytes}"
            )

        if self.quiz.max_uploads_per_window < 1:
            errors.append(
                f"max_uploads_per_window must be >= 1, got {self.quiz.max_uploads_per_window}"
            )

        if self.quiz.upload_window_seconds <= 0:
            errors.append(
                f"upload_window_seconds must be > 0, got {self.quiz.upload_window_seconds}"
            )

        bounds = [bound for bound, _ in self.grades.bands()]
        if any(not (0 <= b <= 100) for b in bounds):
            errors.append(f"grade bands must be in [0, 100], got {bounds}")
        if any(high <= low for high, low in zip(bounds, bounds[1:])):
            errors.append(f"grade bands must be strictly descending, got {bounds}")

        if not self.paths.question_set_schema.exists():
            errors.append(f"Question set schema not found: {self.paths.question_set_schema}")

        return errors


# Global config instance
config = Config()
