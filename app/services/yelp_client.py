"""Yelp Fusion API client (server-side only)."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from app.core.config import settings
from app.core.errors import UpstreamAPIError
from app.schemas.yelp import YelpBusiness, YelpReview, YelpSearchPage

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0
# Yelp max per search request
PAGE_SIZE = 50
# Upper bound for search_all when the caller does not pass one
DEFAULT_MAX_RESULTS = 200


class YelpClient:
    """
    Thin async wrapper over the search, business details and reviews endpoints.

    A fresh httpx.AsyncClient is opened per request. Tests pass an
    httpx.MockTransport as `transport` and a no-op `sleep`.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.yelp.com/v3",
        page_delay: float = 0.1,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.page_delay = page_delay
        self._transport = transport
        self._sleep = sleep

    @classmethod
    def from_settings(cls) -> "YelpClient":
        return cls(
            api_key=settings.yelp_api_key,
            base_url=settings.yelp_api_base,
            page_delay=settings.yelp_page_delay_seconds,
        )

    def _headers(self) -> dict:
        if not self.api_key:
            raise UpstreamAPIError(0, "YELP_API_KEY missing")
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    async def _get(self, path: str, params: dict | None = None) -> dict:
        """GET a Yelp endpoint. Returns parsed JSON or raises UpstreamAPIError."""
        headers = self._headers()
        url = f"{self.base_url}{path}"
        logger.info(f"Calling Yelp API: {url} params={params or {}}")

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Yelp API timeout: url={url}")
            raise UpstreamAPIError(0, "request timed out")
        except httpx.RequestError as e:
            logger.error(f"Yelp API request error: url={url}, error={e}")
            raise UpstreamAPIError(0, str(e))

        if response.status_code != 200:
            body = response.text[:500] if response.text else "(empty)"
            logger.error(f"Yelp API HTTP error: url={url}, status={response.status_code}, body={body}")
            raise UpstreamAPIError(response.status_code, body)

        return response.json()

    async def search(
        self,
        location: str,
        categories: str | None = None,
        limit: int = PAGE_SIZE,
        offset: int = 0,
    ) -> YelpSearchPage:
        """One page of /businesses/search for a location and category filter."""
        params = {
            "location": location,
            "categories": categories or settings.yelp_search_categories,
            "limit": limit,
            "offset": offset,
        }
        data = await self._get("/businesses/search", params)
        return YelpSearchPage.model_validate(data)

    async def search_all(
        self,
        location: str,
        categories: str | None = None,
        max_results: int = DEFAULT_MAX_RESULTS,
        exclude_closed: bool = True,
        min_rating: float | None = None,
        require_image: bool = False,
    ) -> list[YelpBusiness]:
        """
        Page through search results until max_results kept businesses or the end.

        Closed, under-rated and (optionally) image-less businesses are dropped as
        each page arrives; only kept businesses count toward max_results. Paging
        stops on an empty or short page. A page_delay pause separates requests.
        """
        kept: list[YelpBusiness] = []
        offset = 0

        while len(kept) < max_results:
            page = await self.search(location, categories, PAGE_SIZE, offset)
            if not page.businesses:
                break

            for business in page.businesses:
                if exclude_closed and business.is_closed:
                    continue
                if min_rating is not None and business.rating < min_rating:
                    continue
                if require_image and not business.image_url:
                    continue
                kept.append(business)

            logger.info(
                f"Yelp search page: location={location}, offset={offset}, "
                f"returned={len(page.businesses)}, kept_total={len(kept)}"
            )

            if len(page.businesses) < PAGE_SIZE or len(kept) >= max_results:
                break

            offset += PAGE_SIZE
            await self._sleep(self.page_delay)

        return kept[:max_results]

    async def get_business_details(self, business_id: str) -> YelpBusiness:
        """Business Details, which unlike search includes the photos list."""
        data = await self._get(f"/businesses/{business_id}")
        return YelpBusiness.model_validate(data)

    async def get_business_reviews(self, business_id: str) -> list[YelpReview]:
        """Current review excerpts Yelp exposes for a business."""
        data = await self._get(f"/businesses/{business_id}/reviews")
        return [YelpReview.model_validate(r) for r in data.get("reviews") or []]


def get_yelp_client() -> YelpClient:
    """FastAPI dependency; overridden in tests."""
    return YelpClient.from_settings()
