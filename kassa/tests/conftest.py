"""Shared pytest fixtures for kassa tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from kassa.domain.errors import OracleFailure
from kassa.domain.receipt import WordBox
from kassa.receipt.categories import CategoryVocabulary, build_category_vocabulary
from kassa.runtime.paths import reset_paths
from kassa.runtime.storage import SqlCategoryLearningStore, SqlTransactionRecorder, create_session_factory


def box(text: str, x: float, y: float, width: float = 60, height: float = 18) -> WordBox:
    """Word box with clockwise corners starting at the top-left."""
    return WordBox(
        text=text,
        vertices=((x, y), (x + width, y), (x + width, y + height), (x, y + height)),
    )


def lines_to_word_boxes(lines: Sequence[str], line_height: float = 40) -> list[WordBox]:
    """Lay out lines as one word box per token, with the full-text blob first."""
    words: list[WordBox] = []
    for row, line in enumerate(lines):
        x = 10.0
        for token in line.split():
            words.append(box(token, x, 100 + row * line_height))
            x += 15 * len(token) + 10
    blob = WordBox(text="\n".join(lines), vertices=())
    return [blob, *words]


class FakeOracle:
    """Returns canned word boxes, or raises when ``failure`` is set."""

    def __init__(self, words: Sequence[WordBox] = (), failure: str | None = None) -> None:
        self.words = list(words)
        self.failure = failure
        self.calls = 0

    def detect_text(self, image_bytes: bytes) -> list[WordBox]:
        self.calls += 1
        if self.failure:
            raise OracleFailure(self.failure)
        return list(self.words)


@pytest.fixture(autouse=True)
def _isolated_project_root(tmp_path, monkeypatch):
    monkeypatch.setenv("KASSA_HOME", str(tmp_path))
    monkeypatch.delenv("KASSA_DB_URL", raising=False)
    monkeypatch.delenv("KASSA_OCR_BACKEND", raising=False)
    reset_paths()
    yield
    reset_paths()


@pytest.fixture
def session_factory():
    return create_session_factory("sqlite://")


@pytest.fixture
def learning_store(session_factory) -> SqlCategoryLearningStore:
    return SqlCategoryLearningStore(session_factory)


@pytest.fixture
def recorder(session_factory) -> SqlTransactionRecorder:
    return SqlTransactionRecorder(session_factory)


@pytest.fixture
def vocabulary() -> CategoryVocabulary:
    return build_category_vocabulary(
        [
            {
                "expense_categories": [
                    ["Молочка", "Снеки", "Прочая еда"],
                    ["Такси (Яндекс)", "Хозтовары"],
                ],
                "auto_tags": {"Молочка": "Еда", "Снеки": "Еда", "Такси": "Транспорт"},
                "shop_categories": {"Аптека": "Медицина"},
            }
        ]
    )
