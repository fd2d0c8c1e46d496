"""Expense category vocabulary, auto tags and shop default categories.

The vocabulary is the closed set of labels the chat keyboard offers. Labels
may carry a hint in parentheses on the keyboard ("Такси (Яндекс)"); only the
text before " (" is the category itself.

Defaults live in kassa/receipt/rules/default_categories.toml and can be
layered with a project-level config/categories.toml.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

DEFAULT_TAG = "Разное"
CANCEL_WORD = "Отмена"


def category_label_key(text: str) -> str:
    """Strip the keyboard hint suffix: "Такси (Яндекс)" -> "Такси"."""
    return text.strip().split(" (")[0].strip()


@dataclass(frozen=True)
class CategoryVocabulary:
    """Closed set of expense categories plus the tag/shop lookup tables."""

    groups: tuple[tuple[str, ...], ...]
    auto_tags: Mapping[str, str] = field(default_factory=dict)
    shop_categories: Mapping[str, str] = field(default_factory=dict)
    default_tag: str = DEFAULT_TAG

    @property
    def labels(self) -> tuple[str, ...]:
        return tuple(label for group in self.groups for label in group)

    def match_label(self, text: str) -> str | None:
        """Return the category a user reply names, or None if it is not in the vocabulary."""
        key = category_label_key(text)
        allowed = {category_label_key(label) for label in self.labels}
        return key if key in allowed else None

    def tag_for(self, category: str) -> str:
        return self.auto_tags.get(category, self.default_tag)

    def shop_category(self, shop_name: str) -> str | None:
        """Default category for a shop whose name contains a configured keyword."""
        shop_lower = shop_name.lower()
        for keyword, category in self.shop_categories.items():
            if keyword.lower() in shop_lower:
                return category
        return None


def _string_mapping(raw: Any) -> dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    mapping: dict[str, str] = {}
    for key, value in raw.items():
        key_str = str(key).strip()
        value_str = str(value).strip()
        if key_str and value_str:
            mapping[key_str] = value_str
    return mapping


def _label_groups(raw: Any) -> tuple[tuple[str, ...], ...]:
    if not isinstance(raw, Sequence) or isinstance(raw, str):
        return ()
    groups: list[tuple[str, ...]] = []
    for row in raw:
        if isinstance(row, str):
            row = [row]
        if not isinstance(row, Sequence):
            continue
        labels = tuple(str(label).strip() for label in row if str(label).strip())
        if labels:
            groups.append(labels)
    return tuple(groups)


def build_category_vocabulary(configs: Sequence[Mapping[str, Any]] | None = None) -> CategoryVocabulary:
    """
    Merge category configs in order.

    A later config's ``expense_categories`` replaces earlier groups;
    ``auto_tags`` and ``shop_categories`` entries are merged key by key.
    """
    groups: tuple[tuple[str, ...], ...] = ()
    auto_tags: dict[str, str] = {}
    shop_categories: dict[str, str] = {}
    default_tag = DEFAULT_TAG

    for config in configs or ():
        config_groups = _label_groups(config.get("expense_categories"))
        if config_groups:
            groups = config_groups
        auto_tags.update(_string_mapping(config.get("auto_tags")))
        shop_categories.update(_string_mapping(config.get("shop_categories")))
        raw_default = str(config.get("default_tag", "")).strip()
        if raw_default:
            default_tag = raw_default

    return CategoryVocabulary(
        groups=groups,
        auto_tags=auto_tags,
        shop_categories=shop_categories,
        default_tag=default_tag,
    )
