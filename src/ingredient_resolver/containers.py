"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from ingredient_resolver.adapters.fdc_client import HttpxFdcClient
from ingredient_resolver.adapters.snapshot_corpus import SnapshotFoodCorpus
from ingredient_resolver.adapters.supabase_food_repository import SupabaseFoodRepository
from ingredient_resolver.config import Settings
from ingredient_resolver.errors import CorpusUnavailableError
from ingredient_resolver.services.cache import LruTtlCache
from ingredient_resolver.services.candidates import CandidateSource, FoodCorpus
from ingredient_resolver.services.external_search import FdcSearchService
from ingredient_resolver.services.rate_limit import TokenBucketLimiter
from ingredient_resolver.services.resolver import IngredientResolver

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    corpus: FoodCorpus
    fdc_search: FdcSearchService
    candidate_source: CandidateSource
    resolver: IngredientResolver
    close_resources: Callable[[], Awaitable[None]]


def build_corpus(settings: Settings) -> FoodCorpus:
    """Pick the corpus backend: Supabase when configured, else a snapshot."""
    if settings.uses_supabase:
        return SupabaseFoodRepository(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    if settings.corpus_snapshot_path:
        return SnapshotFoodCorpus.load(settings.corpus_snapshot_path)
    raise CorpusUnavailableError(
        "No food corpus configured: set SUPABASE_URL and SUPABASE_SERVICE_KEY "
        "or CORPUS_SNAPSHOT_PATH"
    )


def build_fdc_search(settings: Settings) -> tuple[FdcSearchService, HttpxFdcClient | None]:
    """Create the shared FDC search service and its HTTP client, if keyed."""
    fdc_client = None
    if settings.fdc_api_key:
        fdc_client = HttpxFdcClient.create(
            api_key=settings.fdc_api_key,
            base_url=settings.fdc_base_url,
            timeout_seconds=settings.fdc_timeout_seconds,
        )
    service = FdcSearchService(
        fdc_client=fdc_client,
        cache=LruTtlCache(
            max_entries=settings.fdc_cache_size,
            default_ttl_seconds=settings.fdc_cache_ttl_seconds,
        ),
        limiter=TokenBucketLimiter(settings.fdc_rate_limit_per_hour),
        enable_branded_search=settings.enable_branded_search,
        cache_ttl_seconds=settings.fdc_cache_ttl_seconds,
        max_wait_seconds=settings.fdc_max_wait_seconds,
    )
    return service, fdc_client


def build_container(
    settings: Settings | None = None, corpus: FoodCorpus | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_corpus = corpus or build_corpus(resolved_settings)
    fdc_search, fdc_client = build_fdc_search(resolved_settings)
    candidate_source = CandidateSource(
        corpus=resolved_corpus,
        external=fdc_search,
        candidate_limit=resolved_settings.candidate_limit,
        external_min_local=resolved_settings.external_min_local,
        external_page_size=resolved_settings.external_page_size,
    )
    resolver = IngredientResolver(
        candidates=candidate_source,
        low_confidence_threshold=resolved_settings.low_confidence_threshold,
    )
    _logger.info(
        "Container built: corpus=%s external=%s",
        type(resolved_corpus).__name__,
        fdc_search.enabled,
    )

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        corpus=resolved_corpus,
        fdc_search=fdc_search,
        candidate_source=candidate_source,
        resolver=resolver,
        close_resources=close_resources,
    )
