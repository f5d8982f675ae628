"""Addon config parser.

Reads a directory of JSON sources, one addon per file, and builds
validated ``AddonConfig`` values. A malformed source aborts the whole
parse with a ``ConfigError`` naming the file, so a bad file never
leaves a partially loaded addon collection behind.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from solrindex.addons.config import (
    AddonConfig,
    ChildConfig,
    FieldConfig,
    RemoteConfig,
    default_addon_name,
)
from solrindex.errors import ConfigError

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".json"


class AddonConfigParser:
    """Parses addon config sources.

    Example::

        parser = AddonConfigParser()
        addons = parser.parse_dir(Path("addon_configs"))
    """

    def parse_dir(self, addon_dir: str | Path) -> list[AddonConfig]:
        """Parse every ``*.json`` source in a directory.

        Files are read in name order, which fixes registration order.

        Args:
            addon_dir: Directory of addon sources.

        Returns:
            Parsed addons, one per file.

        Raises:
            ConfigError: If the directory is missing, a source is
                malformed, or two sources target the same table.
        """
        directory = Path(addon_dir)
        if not directory.is_dir():
            raise ConfigError("addon directory does not exist", source=str(directory))

        addons: list[AddonConfig] = []
        seen: dict[str, str] = {}
        for path in sorted(directory.glob(f"*{SOURCE_SUFFIX}")):
            addon = self.parse_file(path)
            if addon.table in seen:
                raise ConfigError(
                    f"table '{addon.table}' is already configured by {seen[addon.table]}",
                    source=str(path),
                )
            seen[addon.table] = str(path)
            addons.append(addon)

        logger.info("Parsed %d addon(s) from %s", len(addons), directory)
        return addons

    def parse_file(self, path: str | Path) -> AddonConfig:
        """Parse one JSON source file.

        Raises:
            ConfigError: If the file is unreadable or malformed.
        """
        source = str(path)
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError(f"cannot read source: {exc}", source=source) from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON: {exc}", source=source) from exc
        return self.parse_dict(data, source=source)

    def parse_dict(self, data: Any, source: str = "<dict>") -> AddonConfig:
        """Build an addon from an already-decoded source.

        Args:
            data: Decoded source object.
            source: Name used in error messages.

        Returns:
            The validated addon.

        Raises:
            ConfigError: On any shape violation.
        """
        if not isinstance(data, dict):
            raise ConfigError("source must be a JSON object", source=source)

        table = _require_str(data, "table", source, "addon")
        name = _optional_str(data, "name", source) or default_addon_name(table)
        result_type = _optional_str(data, "resultType", source) or table
        flag = _optional_str(data, "flag", source)

        raw_fields = data.get("fields", [])
        if not isinstance(raw_fields, list):
            raise ConfigError("'fields' must be a list", source=source)
        fields = [
            self._parse_field(raw, name, source, index) for index, raw in enumerate(raw_fields)
        ]

        raw_children = data.get("children", [])
        if not isinstance(raw_children, list):
            raise ConfigError("'children' must be a list", source=source)
        children = [
            self._parse_child(raw, source, index) for index, raw in enumerate(raw_children)
        ]

        return AddonConfig(
            table=table,
            name=name,
            result_type=result_type,
            fields=fields,
            children=children,
            flag=flag,
            tagged=_bool(data, "tagged", False, source, "addon"),
            source=source,
        )

    # ---------------------------------------------------------------

    @staticmethod
    def _parse_field(raw: Any, addon_name: str, source: str, index: int) -> FieldConfig:
        where = f"fields[{index}]"
        if isinstance(raw, str):
            return FieldConfig(name=raw, addon_name=addon_name)
        if not isinstance(raw, dict):
            raise ConfigError(f"{where} must be an object or a name", source=source)

        remote = None
        raw_remote = raw.get("remote")
        if raw_remote is not None:
            if not isinstance(raw_remote, dict):
                raise ConfigError(f"{where}.remote must be an object", source=source)
            remote = RemoteConfig(
                table=_require_str(raw_remote, "table", source, f"{where}.remote"),
                key=_require_str(raw_remote, "key", source, f"{where}.remote"),
            )

        return FieldConfig(
            name=_require_str(raw, "name", source, where),
            addon_name=addon_name,
            indexed=_bool(raw, "indexed", True, source, where),
            facet=_bool(raw, "facet", False, source, where),
            is_title=_bool(raw, "isTitle", False, source, where),
            remote=remote,
            label=_optional_str(raw, "label", source) or "",
        )

    @staticmethod
    def _parse_child(raw: Any, source: str, index: int) -> ChildConfig:
        where = f"children[{index}]"
        if not isinstance(raw, dict):
            raise ConfigError(f"{where} must be an object", source=source)
        return ChildConfig(
            table=_require_str(raw, "table", source, where),
            parent_key=_require_str(raw, "parentKey", source, where),
        )


def _require_str(data: dict[str, Any], key: str, source: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where} is missing required '{key}'", source=source)
    return value.strip()


def _optional_str(data: dict[str, Any], key: str, source: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string", source=source)
    return value.strip() or None


def _bool(data: dict[str, Any], key: str, default: bool, source: str, where: str) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ConfigError(f"{where}.{key} must be true or false", source=source)
    return value
