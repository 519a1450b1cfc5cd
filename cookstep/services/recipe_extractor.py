"""Recipe extraction from a page URL with ordered fallbacks."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from cookstep.config import settings
from cookstep.models.recipe import Recipe
from cookstep.services.fetcher_service import fetch_page
from cookstep.services.heuristic_extractor import extract_heuristic
from cookstep.services.structured_data import extract_structured
from cookstep.utils.exceptions import RecipeNotFoundError, UpstreamStatusError
from cookstep.utils.recipe_normalization import RawRecipeFields, normalize_recipe

logger = logging.getLogger(__name__)


def extract_fields(html: str) -> Optional[RawRecipeFields]:
    """JSON-LD first, markup heuristics only when the page has no JSON-LD Recipe."""
    fields = extract_structured(html)
    if fields is not None:
        logger.info("Recipe extracted from JSON-LD", extra={"extractor": "structured"})
        return fields

    fields = extract_heuristic(html)
    if fields is not None:
        logger.info("Recipe extracted from markup heuristics", extra={"extractor": "heuristic"})
    return fields


class RecipeExtractor:
    """Fetch, extract and normalize a recipe page."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self.client = client
        self.timeout = settings.fetch_timeout_seconds if timeout is None else timeout

    async def extract_from_url(self, url: str, servings: Optional[int] = None) -> Recipe:
        """
        Strategy:
          1) fetch the page (8 s budget by default)
          2) JSON-LD Recipe, else class-name / section-label heuristics
          3) normalize, rescaling ingredients when servings is given

        Raises:
            FetchTimeoutError, ScrapingError: the page could not be fetched
            UpstreamStatusError: the site answered with a non-2xx status
            RecipeNotFoundError: neither extractor found recipe data
        """
        page = await fetch_page(url, timeout=self.timeout, client=self.client)
        if not page.ok:
            logger.warning(
                f"[extract_from_url] Upstream returned {page.status}",
                extra={"url": url, "status_code": page.status},
            )
            raise UpstreamStatusError(page.status, url)

        fields = extract_fields(page.body)
        if fields is None:
            logger.info(f"[extract_from_url] No recipe data found at {url}", extra={"url": url})
            raise RecipeNotFoundError(f"No recipe data found at {url}")

        return normalize_recipe(fields, requested_servings=servings, source=url)
