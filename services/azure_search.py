"""Azure Cognitive Search client and the always-succeeding search adapter."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import AzureSearchConfig
from schemas.search import SearchDebugInfo, SearchOutcome, SearchSource, SourceDocument

logger = logging.getLogger(__name__)

# Candidate fields in precedence order; providers name these differently.
TITLE_FIELDS = ("title", "metadata_storage_name", "metadata_spo_item_name", "name")
CONTENT_FIELDS = ("content", "merged_content", "text", "body", "description")

ERROR_DETAILS_LENGTH = 200


class AzureSearchRequestError(Exception):
    """Raised when the search service answers with a non-2xx status."""

    def __init__(self, status_code: int, details: str, url: str, index: str):
        super().__init__(f"Azure Search request failed ({status_code})")
        self.status_code = status_code
        self.details = details
        self.url = url
        self.index = index


def first_non_empty(record: Dict[str, Any], fields: tuple) -> Optional[str]:
    """Return the first field value that is a non-blank string."""
    for name in fields:
        value = record.get(name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def normalize_record(record: Dict[str, Any]) -> SourceDocument:
    """Resolve display title and body of a raw provider record."""
    return SourceDocument(
        title=first_non_empty(record, TITLE_FIELDS),
        content=first_non_empty(record, CONTENT_FIELDS),
        raw=record,
    )


class AzureSearchClient:
    """Thin HTTP client for the `docs/search` endpoint of one index."""

    def __init__(self, config: AzureSearchConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def build_body(self, query: str, top: int) -> Dict[str, Any]:
        body: Dict[str, Any] = {"search": query, "top": top, "select": "*"}
        if self.config.semantic_configuration:
            body["queryType"] = "semantic"
            body["semanticConfiguration"] = self.config.semantic_configuration
        if self.config.highlight_fields:
            body["highlight"] = self.config.highlight_fields
        return body

    async def query(self, query: str, top: int) -> Dict[str, Any]:
        """
        Run a search and return the decoded provider response.

        Raises:
            AzureSearchRequestError: provider answered with a non-2xx status
            httpx.HTTPError: transport failure
            ValueError: the body is not a JSON object
        """
        url = self.config.search_url
        logger.info(f"Search URL: {url}")
        logger.info(f"Query: {query}")

        async with httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport) as client:
            response = await client.post(
                url,
                headers={"Content-Type": "application/json", "api-key": self.config.key},
                json=self.build_body(query, top),
            )

        if not response.is_success:
            logger.error(f"Azure Search API error {response.status_code}: {response.text}")
            raise AzureSearchRequestError(response.status_code, response.text, url, self.config.index)

        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected search response")
        logger.info(f"Search results count: {len(data.get('value') or [])}")
        return data


class AzureSearchAdapter:
    """
    Search one index and report the outcome as data.

    `search` never raises for provider or transport failures: the outcome
    carries `count=0`, no results and a short diagnostic in `error`.
    """

    def __init__(
        self,
        source: SearchSource,
        config: AzureSearchConfig,
        default_top: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.source = source
        self.config = config
        self.default_top = default_top
        self.client = AzureSearchClient(config, transport=transport)

    def _debug_info(self, total: Optional[int] = None) -> SearchDebugInfo:
        return SearchDebugInfo(endpoint=self.config.endpoint, index=self.config.index, total_results=total)

    def _failed(self, query: str, error: str) -> SearchOutcome:
        return SearchOutcome(
            source=self.source,
            query=query,
            error=error,
            debug_info=self._debug_info(),
        )

    async def search(self, query: str, top: Optional[int] = None) -> SearchOutcome:
        query = (query or "").strip()
        if not query:
            return SearchOutcome(source=self.source, query="", error="Query is required")

        if not self.config.is_configured:
            return self._failed(query, f"Azure Search credentials not configured for {self.source.label}")

        try:
            data = await self.client.query(query, top or self.default_top)
        except AzureSearchRequestError as e:
            logger.warning(f"{self.source.value} search failed with status {e.status_code}")
            return self._failed(
                query,
                f"Azure Search request failed ({e.status_code}): {e.details[:ERROR_DETAILS_LENGTH]}",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.source.value} search transport error: {e!r}")
            return self._failed(query, str(e) or type(e).__name__)

        raw: List[Dict[str, Any]] = [r for r in (data.get("value") or []) if isinstance(r, dict)]
        return SearchOutcome(
            source=self.source,
            query=query,
            count=len(raw),
            results=[normalize_record(r) for r in raw],
            debug_info=self._debug_info(data.get("@odata.count")),
        )
