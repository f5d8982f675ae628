"""Indexer configuration.

``IndexSettings`` carries the Solr connection defaults, the addon
directory, and the knobs of the reindex run. Settings are plain data:
load them from a dict or a JSON file and pass them to the indexer.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_ADDON_DIR = Path(__file__).resolve().parent / "addon_configs"
DEFAULT_FACET_PREFIX = "assyr_"


@dataclass
class IndexSettings:
    """Configuration for indexing into Solr.

    Attributes:
        solr_host: Solr host name.
        solr_port: Solr port.
        solr_core: Solr core (collection) name.
        addon_dir: Directory of addon config sources.
        facet_prefix: Namespace prefix for domain facet fields.
        page_size: Records fetched per repository page.
        excluded_collection_ids: Items in these collections are skipped.
        base_url: Public site root used to build record URLs.
        admin_path: Path segment of the admin interface.
        timeout_seconds: HTTP timeout for Solr requests.
        retry_attempts: Attempts per Solr call on transport errors.
    """

    solr_host: str = "localhost"
    solr_port: int = 8983
    solr_core: str = "omeka"
    addon_dir: Path = DEFAULT_ADDON_DIR
    facet_prefix: str = DEFAULT_FACET_PREFIX
    page_size: int = 100
    excluded_collection_ids: list[int] = field(default_factory=list)
    base_url: str = ""
    admin_path: str = "/admin"
    timeout_seconds: float = 10.0
    retry_attempts: int = 3

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be positive, got {self.retry_attempts}")
        self.addon_dir = Path(self.addon_dir)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "solr_host": self.solr_host,
            "solr_port": self.solr_port,
            "solr_core": self.solr_core,
            "addon_dir": str(self.addon_dir),
            "facet_prefix": self.facet_prefix,
            "page_size": self.page_size,
            "excluded_collection_ids": list(self.excluded_collection_ids),
            "base_url": self.base_url,
            "admin_path": self.admin_path,
            "timeout_seconds": self.timeout_seconds,
            "retry_attempts": self.retry_attempts,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IndexSettings:
        """Deserialize from dictionary, filling defaults for missing keys."""
        return cls(
            solr_host=data.get("solr_host", "localhost"),
            solr_port=int(data.get("solr_port", 8983)),
            solr_core=data.get("solr_core", "omeka"),
            addon_dir=Path(data.get("addon_dir", DEFAULT_ADDON_DIR)),
            facet_prefix=data.get("facet_prefix", DEFAULT_FACET_PREFIX),
            page_size=int(data.get("page_size", 100)),
            excluded_collection_ids=[int(i) for i in data.get("excluded_collection_ids", [])],
            base_url=data.get("base_url", ""),
            admin_path=data.get("admin_path", "/admin"),
            timeout_seconds=float(data.get("timeout_seconds", 10.0)),
            retry_attempts=int(data.get("retry_attempts", 3)),
        )

    @classmethod
    def load(cls, path: str | Path) -> IndexSettings:
        """Load settings from a JSON file.

        Raises:
            ValueError: If the file does not hold a JSON object.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Settings file must hold a JSON object: {path}")
        return cls.from_dict(data)
