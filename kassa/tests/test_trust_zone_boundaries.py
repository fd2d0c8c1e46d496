"""Trust-zone dependency rules enforced from docs/trust_zone.md."""

from __future__ import annotations

import ast
import importlib.util
import re
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
_DOC = _ROOT / "docs" / "trust_zone.md"
_PACKAGE = "kassa"
_ZONE_NAMES = {"Privileged", "Orchestrator", "Pure"}
_ALLOWED_TARGET_ZONES = {
    "Privileged": {"Privileged", "Pure"},
    "Orchestrator": {"Privileged", "Orchestrator", "Pure"},
    "Pure": {"Pure"},
}
_MAPPING_END_HEADINGS = {"Dependency Rules", "Contributor Checklist"}


def _parse_zone_mapping() -> dict[str, list[tuple[str, ...]]]:
    mapping: dict[str, list[tuple[str, ...]]] = {zone: [] for zone in _ZONE_NAMES}

    in_mapping = False
    current_zone: str | None = None
    for line in _DOC.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if stripped == "Current Directory Mapping":
            in_mapping = True
            continue
        if not in_mapping:
            continue
        if stripped in _MAPPING_END_HEADINGS:
            break

        token_match = re.match(r"^\s*-\s+`([^`]+)`", line)
        if not token_match:
            continue
        token = token_match.group(1).strip()

        if token in _ZONE_NAMES:
            current_zone = token
        elif current_zone is not None:
            parts = tuple(part for part in token.strip("/").split("/") if part)
            if parts:
                mapping[current_zone].append(parts)

    return mapping


def _zone_entries() -> list[tuple[tuple[str, ...], str]]:
    entries = [(parts, zone) for zone, paths in _parse_zone_mapping().items() for parts in paths]
    # Longest prefix wins
    return sorted(entries, key=lambda item: len(item[0]), reverse=True)


def _zone_for_parts(parts: tuple[str, ...], zone_entries: list[tuple[tuple[str, ...], str]]) -> str | None:
    for prefix, zone in zone_entries:
        if parts[: len(prefix)] == prefix:
            return zone
    return None


def _zoned_files(zone_entries: list[tuple[tuple[str, ...], str]]) -> list[tuple[Path, str]]:
    files: dict[Path, str] = {}
    for prefix, _ in zone_entries:
        directory = _ROOT / Path(*prefix)
        for path in directory.rglob("*.py"):
            zone = _zone_for_parts(path.relative_to(_ROOT).parts, zone_entries)
            if zone is not None:
                files[path] = zone
    return sorted(files.items())


def _imported_modules(path: Path) -> list[str]:
    rel_parts = list(path.relative_to(_ROOT).with_suffix("").parts)
    is_package = rel_parts[-1] == "__init__"
    if is_package:
        rel_parts = rel_parts[:-1]
    module_name = ".".join([_PACKAGE, *rel_parts])
    current_package = module_name if is_package else module_name.rsplit(".", 1)[0]

    imports: list[str] = []
    for node in ast.walk(ast.parse(path.read_text(encoding="utf-8"), filename=str(path))):
        if isinstance(node, ast.Import):
            imports.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level == 0:
                if node.module:
                    imports.append(node.module)
                continue
            try:
                imports.append(importlib.util.resolve_name("." * node.level + (node.module or ""), current_package))
            except ImportError:
                continue
    return imports


def test_trust_zone_doc_paths_exist() -> None:
    mapping = _parse_zone_mapping()
    missing: list[str] = []

    for zone, paths in mapping.items():
        assert paths, f"Missing zone mapping for {zone} in {_DOC}"
        missing.extend("/".join(parts) for parts in paths if not (_ROOT / Path(*parts)).exists())

    assert not missing, "Trust-zone paths in docs do not exist:\n" + "\n".join(sorted(missing))


def test_every_package_is_assigned_a_zone() -> None:
    zone_entries = _zone_entries()
    unassigned = [
        path.name
        for path in _ROOT.iterdir()
        if path.is_dir() and (path / "__init__.py").exists() and path.name != "tests"
        if _zone_for_parts((path.name,), zone_entries) is None
    ]

    assert not unassigned, "Packages without a trust zone: " + ", ".join(sorted(unassigned))


def test_trust_zone_import_boundaries() -> None:
    zone_entries = _zone_entries()
    violations: list[str] = []

    for path, source_zone in _zoned_files(zone_entries):
        for module in _imported_modules(path):
            if not module.startswith(f"{_PACKAGE}."):
                continue
            target_zone = _zone_for_parts(tuple(module.split(".")[1:]), zone_entries)
            if target_zone is not None and target_zone not in _ALLOWED_TARGET_ZONES[source_zone]:
                violations.append(f"{path.relative_to(_ROOT)}: {source_zone} imports {module} ({target_zone})")

    assert not violations, "Trust-zone import violations:\n" + "\n".join(violations)


def test_pure_zone_does_not_log() -> None:
    zone_entries = _zone_entries()
    offenders = [
        str(path.relative_to(_ROOT))
        for path, zone in _zoned_files(zone_entries)
        if zone == "Pure" and "logging" in _imported_modules(path)
    ]

    assert not offenders, "Pure modules importing logging:\n" + "\n".join(offenders)
