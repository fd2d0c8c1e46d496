"""Runtime loader for the expense category vocabulary."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from kassa.receipt.categories import CategoryVocabulary, build_category_vocabulary
from kassa.runtime.logging import get_logger
from kassa.runtime.paths import get_paths

logger = get_logger(__name__)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    logger.debug("Loaded category config from %s", path)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=8)
def load_category_vocabulary(config_paths: tuple[str, ...] | None = None) -> CategoryVocabulary:
    """Load packaged defaults layered with the project's config/categories.toml."""
    if config_paths is None:
        p = get_paths()
        config_files = [p.default_categories, p.categories]
    else:
        config_files = [Path(path) for path in config_paths]

    vocabulary = build_category_vocabulary(tuple(_load_toml(path) for path in config_files))
    if not vocabulary.labels:
        raise ValueError(f"No expense categories configured in: {', '.join(map(str, config_files))}")
    return vocabulary
