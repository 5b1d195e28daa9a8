"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status

from ingredient_resolver.api.models import (
    ResolveRequest,
    ResolveResponse,
    SearchResponse,
    SearchResult,
    UnresolvedResponse,
)
from ingredient_resolver.app_logging import configure_logging
from ingredient_resolver.containers import AppContainer
from ingredient_resolver.domain.resolution import RankQuery
from ingredient_resolver.services.plausibility import kcal_band_for_query
from ingredient_resolver.services.ranking import rank_candidates
from ingredient_resolver.services.servings import derive_serving_options

MIN_SEARCH_LENGTH = 2
MAX_SEARCH_LIMIT = 50


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/resolve", response_model=None)
    async def resolve(
        payload: ResolveRequest, request: Request
    ) -> ResolveResponse | UnresolvedResponse:
        """Resolve one ingredient line into a food and grams."""
        state_container: AppContainer = request.app.state.container
        overrides = [item.to_domain() for item in payload.user_overrides or []]
        resolution = await state_container.resolver.resolve_line(
            payload.line, user_overrides=overrides or None
        )
        if resolution.resolved is None:
            reason = resolution.failure.value if resolution.failure else "unresolved"
            logger.info("Unresolved ingredient: line=%r reason=%s", payload.line, reason)
            return UnresolvedResponse(line=payload.line, reason=reason)
        return ResolveResponse.from_resolution(resolution)

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        s: str = Query(default=""),
        limit: int = Query(default=10, ge=1, le=MAX_SEARCH_LIMIT),
    ) -> SearchResponse:
        """Return ranked candidates with serving options."""
        query = s.strip()
        if len(query) < MIN_SEARCH_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Query must be at least {MIN_SEARCH_LENGTH} characters",
            )
        state_container: AppContainer = request.app.state.container
        candidates = await state_container.candidate_source.find(query)
        ranked = rank_candidates(
            candidates,
            RankQuery(query=query, kcal_band=kcal_band_for_query(query)),
            state_container.resolver.weights,
        )
        return SearchResponse(
            query=query,
            results=[
                SearchResult.from_ranked(item, derive_serving_options(item.candidate))
                for item in ranked[:limit]
            ],
        )

    return app
