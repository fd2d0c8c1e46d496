"""Centralized path management for kassa.

This module provides a single source of truth for all project paths.
The project root is KASSA_HOME when set, otherwise the current directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_project_root() -> Path:
    """Determine the project root directory."""
    home = os.environ.get("KASSA_HOME")
    return Path(home).expanduser() if home else Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths."""

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        self.root = self.root.resolve()

    # --- Source code paths ---
    @property
    def src(self) -> Path:
        """kassa package directory."""
        return Path(__file__).resolve().parents[1]

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def categories(self) -> Path:
        """Project-level category vocabulary overrides."""
        return self.config / "categories.toml"

    @property
    def default_categories(self) -> Path:
        """Packaged default category vocabulary."""
        return self.src / "receipt" / "rules" / "default_categories.toml"

    # --- Data paths ---
    @property
    def data(self) -> Path:
        """SQLite database directory (data/)."""
        return self.root / "data"

    @property
    def database(self) -> Path:
        return self.data / "kassa.db"

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL; KASSA_DB_URL overrides the default SQLite file."""
        return os.environ.get("KASSA_DB_URL") or f"sqlite:///{self.database}"

    # --- Receipt paths ---
    @property
    def receipts(self) -> Path:
        """Root receipts directory."""
        return self.root / "receipts"

    @property
    def receipts_ocr_json(self) -> Path:
        """Raw OCR results (JSON) kept for debugging the parser."""
        return self.receipts / "ocr_json"

    def ensure_directories(self) -> None:
        """Create data and receipt directories if they don't exist."""
        self.data.mkdir(parents=True, exist_ok=True)
        self.receipts_ocr_json.mkdir(parents=True, exist_ok=True)


_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance.

    Returns:
        The global ProjectPaths instance.
    """
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached paths so KASSA_HOME is re-read (tests, CLI --home)."""
    global _paths
    _paths = None
