"""Minimal Solr client over the JSON update API.

Covers the handful of calls the indexer makes: add documents, commit,
optimize, delete by query and ping. Transport failures raise
``SolrConnectionError``; non-2xx responses raise ``SolrClientError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import requests

from solrindex.errors import SolrClientError, SolrConnectionError
from solrindex.mapping.document import Document
from solrindex.settings import IndexSettings

logger = logging.getLogger(__name__)

HOST_OPTION = "solr_search_host"
PORT_OPTION = "solr_search_port"
CORE_OPTION = "solr_search_core"


@dataclass(frozen=True)
class SolrConnection:
    """Where a Solr core lives.

    Attributes:
        host: Host name.
        port: Port number.
        core: Core (collection) name.
    """

    host: str = "localhost"
    port: int = 8983
    core: str = "omeka"

    @property
    def base_url(self) -> str:
        """Return the core's root address."""
        return f"http://{self.host}:{self.port}/solr/{self.core.strip('/')}"

    @classmethod
    def from_options(
        cls,
        options: Mapping[str, Any] | None,
        settings: IndexSettings | None = None,
    ) -> SolrConnection:
        """Build a connection from per-call options over settings.

        Args:
            options: May hold ``solr_search_host``, ``solr_search_port``
                and ``solr_search_core``. Missing or empty keys fall back
                to settings.
            settings: Defaults. Uses ``IndexSettings()`` when None.
        """
        settings = settings or IndexSettings()
        options = options or {}
        return cls(
            host=options.get(HOST_OPTION) or settings.solr_host,
            port=int(options.get(PORT_OPTION) or settings.solr_port),
            core=options.get(CORE_OPTION) or settings.solr_core,
        )


class SolrClient:
    """Talks to one Solr core.

    Args:
        connection: Target core.
        timeout: Per-request timeout in seconds.
        session: HTTP session. A new ``requests.Session`` when omitted.

    Example::

        client = SolrClient(SolrConnection("localhost", 8983, "omeka"))
        client.add_documents([doc])
        client.commit()
    """

    def __init__(
        self,
        connection: SolrConnection,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.connection = connection
        self.timeout = timeout
        self._session = session or requests.Session()

    def add_documents(self, documents: Iterable[Document | Mapping[str, Any]]) -> int:
        """Submit documents for indexing.

        Returns:
            The number of documents sent.
        """
        payload = [d.to_dict() if isinstance(d, Document) else dict(d) for d in documents]
        if not payload:
            return 0
        self._post("update", payload)
        logger.debug("Sent %d document(s) to %s", len(payload), self.connection.base_url)
        return len(payload)

    def commit(self) -> None:
        """Make pending changes visible to searchers."""
        self._post("update", {"commit": {}})

    def optimize(self) -> None:
        """Merge index segments."""
        self._post("update", {"optimize": {}})

    def delete_by_query(self, query: str) -> None:
        """Delete every document matching a Solr query."""
        self._post("update", {"delete": {"query": query}})

    def ping(self) -> bool:
        """Return True if the core answers its ping handler with OK.

        Raises:
            SolrConnectionError: If Solr cannot be reached.
            SolrClientError: If the ping handler rejects the request.
        """
        data = self._request("GET", "admin/ping", params={"wt": "json"})
        return str(data.get("status", "")).upper() == "OK"

    # ---------------------------------------------------------------

    def _post(self, path: str, body: Any) -> dict[str, Any]:
        return self._request("POST", path, json=body, params={"wt": "json"})

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.connection.base_url}/{path}"
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            raise SolrConnectionError(f"Solr unreachable at {url}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise SolrClientError(
                f"Solr returned HTTP {response.status_code} for {method} {url}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
