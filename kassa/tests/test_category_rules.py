from pathlib import Path

import pytest

from kassa.receipt.categories import build_category_vocabulary, category_label_key
from kassa.runtime.category_rules import load_category_vocabulary
from kassa.runtime.paths import get_paths


def test_packaged_defaults_load() -> None:
    vocabulary = load_category_vocabulary((str(get_paths().default_categories),))

    assert "Молочка" in vocabulary.labels
    assert vocabulary.tag_for("Молочка") == "Еда"
    assert vocabulary.tag_for("Неизвестно") == "Разное"
    assert vocabulary.shop_category("MAGNUM SUPER - Abay") == "Прочая еда"


def test_project_config_overrides_defaults(tmp_path: Path) -> None:
    override = tmp_path / "categories.toml"
    override.write_text(
        'expense_categories = [["Еда", "Дом"]]\ndefault_tag = "Прочее"\n\n[auto_tags]\n"Дом" = "Хозяйство"\n',
        encoding="utf-8",
    )

    vocabulary = load_category_vocabulary((str(get_paths().default_categories), str(override)))

    assert vocabulary.labels == ("Еда", "Дом")
    assert vocabulary.tag_for("Дом") == "Хозяйство"
    assert vocabulary.tag_for("Еда") == "Прочее"
    # shop mappings from the defaults survive the override
    assert vocabulary.shop_category("Аптека 24") == "Медицина"


def test_missing_vocabulary_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_category_vocabulary((str(tmp_path / "missing.toml"),))


def test_default_load_reads_project_config(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "categories.toml").write_text('expense_categories = [["Только это"]]\n', encoding="utf-8")
    load_category_vocabulary.cache_clear()

    try:
        assert load_category_vocabulary().labels == ("Только это",)
    finally:
        load_category_vocabulary.cache_clear()


def test_label_matching_ignores_hint_suffix() -> None:
    vocabulary = build_category_vocabulary([{"expense_categories": [["Такси (Яндекс)"], "Другое"]}])

    assert category_label_key(" Такси (Яндекс) ") == "Такси"
    assert vocabulary.match_label("Такси") == "Такси"
    assert vocabulary.match_label("Такси (Uber)") == "Такси"
    assert vocabulary.match_label("Такс") is None
    assert vocabulary.labels == ("Такси (Яндекс)", "Другое")
