"""Dispatch one user query to the selected search sources."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

import httpx

from config import Settings
from schemas.search import SearchOutcome, SearchSource
from services.azure_search import AzureSearchAdapter

logger = logging.getLogger(__name__)


@dataclass
class FanoutResult:
    """Per-source outcomes of one query, in the order the sources were searched."""
    query: str
    outcomes: Dict[SearchSource, SearchOutcome] = field(default_factory=dict)

    @property
    def total_results(self) -> int:
        return sum(outcome.count for outcome in self.outcomes.values())

    @property
    def errors(self) -> List[Tuple[SearchSource, str]]:
        return [(source, o.error) for source, o in self.outcomes.items() if o.error]


def _ordered_sources(sources: Union[SearchSource, Iterable[SearchSource]]) -> List[SearchSource]:
    if isinstance(sources, SearchSource):
        return [sources]
    ordered: List[SearchSource] = []
    for source in sources:
        source = SearchSource(source)
        if source not in ordered:
            ordered.append(source)
    return ordered


class SearchFanout:
    """Runs the adapters for the requested sources one after another."""

    def __init__(self, adapters: Dict[SearchSource, AzureSearchAdapter]):
        self.adapters = dict(adapters)

    @property
    def configured_sources(self) -> List[SearchSource]:
        return [s for s, adapter in self.adapters.items() if adapter.config.is_configured]

    async def fanout(
        self,
        query: str,
        sources: Union[SearchSource, Iterable[SearchSource]],
        top: Optional[int] = None,
    ) -> FanoutResult:
        result = FanoutResult(query=query)
        for source in _ordered_sources(sources):
            adapter = self.adapters.get(source)
            if adapter is None:
                result.outcomes[source] = SearchOutcome(
                    source=source,
                    query=query,
                    error=f"Search source '{source.value}' is not configured",
                )
                continue
            result.outcomes[source] = await adapter.search(query, top=top)

        logger.info(
            f"Fanout for {len(result.outcomes)} source(s) returned {result.total_results} result(s)"
            f" with {len(result.errors)} error(s)"
        )
        return result


def build_fanout(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> SearchFanout:
    """One adapter per source, each with its own explicit index configuration."""
    configs = {
        SearchSource.BLOB: settings.blob_search,
        SearchSource.SHAREPOINT: settings.sharepoint_search,
    }
    return SearchFanout({
        source: AzureSearchAdapter(source, config, default_top=settings.default_top, transport=transport)
        for source, config in configs.items()
    })
