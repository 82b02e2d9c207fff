"""
Yelp ingestion pipeline.

For each locality: search Yelp (closed, under-rated and image-less candidates are
dropped while paging), drop chain brands, truncate to the per-locality target,
fetch details for photos, then normalize and upsert every survivor.

Nothing is retried. A failure for one candidate is recorded and the next
candidate is processed; a failure listing a locality aborts only that locality.
Counters are kept per run and per locality.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import StorageError, UpstreamAPIError
from app.schemas.ingest import IngestRequest, IngestResults, LocalityResult
from app.schemas.yelp import YelpBusiness
from app.services.business_store import transform_yelp_business, upsert_business
from app.services.chain_filter import filter_chains
from app.services.yelp_client import YelpClient

logger = logging.getLogger(__name__)


def _has_photos(business: YelpBusiness) -> bool:
    return bool(business.image_url) or any(business.photos)


class IngestionRun:
    """One ingestion run; owns its counters."""

    def __init__(
        self,
        db: Session,
        yelp: YelpClient,
        request: IngestRequest,
        categories: str | None = None,
        locality_delay: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.db = db
        self.yelp = yelp
        self.request = request
        self.categories = categories or settings.yelp_search_categories
        self.locality_delay = (
            settings.ingest_locality_delay_seconds if locality_delay is None else locality_delay
        )
        self._sleep = sleep
        self.results = IngestResults()

    @property
    def localities(self) -> list[str]:
        if self.request.localities:
            return self.request.localities
        return list(settings.ingest_default_localities)

    async def run(self) -> IngestResults:
        for locality in self.localities:
            try:
                await self._ingest_locality(locality)
            except Exception as e:
                msg = f"Error processing {locality}: {e}"
                logger.error(msg)
                self.results.errors.append(msg)

            # Small delay between localities to respect rate limits
            await self._sleep(self.locality_delay)

        logger.info(
            f"Ingestion finished: total={self.results.total}, processed={self.results.processed}, "
            f"skipped={self.results.skipped}, filtered={self.results.filtered}, "
            f"errors={len(self.results.errors)}"
        )
        return self.results

    async def _ingest_locality(self, locality: str) -> None:
        target = self.request.max_per_locality
        logger.info(f"Fetching businesses for {locality}...")

        # Over-fetch so chain filtering still leaves enough candidates
        candidates = await self.yelp.search_all(
            locality,
            self.categories,
            max_results=target * 2,
            exclude_closed=True,
            min_rating=self.request.min_rating,
            require_image=self.request.require_photos,
        )
        logger.info(f"Found {len(candidates)} candidates in {locality}")

        filtered = 0
        if self.request.exclude_chains:
            independent = filter_chains(candidates)
            filtered += len(candidates) - len(independent)
            candidates = independent

        if len(candidates) > target:
            filtered += len(candidates) - target
            candidates = candidates[:target]

        stats = LocalityResult(locality=locality, count=len(candidates), filtered=filtered)
        self.results.per_locality.append(stats)
        self.results.total += stats.count
        self.results.filtered += filtered

        for candidate in candidates:
            business = await self._resolve(candidate, stats)
            if business is not None:
                self._store(business, stats)

        logger.info(
            f"{locality}: count={stats.count}, processed={stats.processed}, "
            f"skipped={stats.skipped}, filtered={stats.filtered}"
        )

    async def _resolve(self, candidate: YelpBusiness, stats: LocalityResult) -> YelpBusiness | None:
        """Fetch details (for photos) if requested. None means the candidate was skipped."""
        if not self.request.fetch_photos:
            return candidate

        try:
            return await self.yelp.get_business_details(candidate.id)
        except (UpstreamAPIError, ValueError) as e:
            if not self.request.require_photos:
                logger.warning(f"Details fetch failed for {candidate.name}, using search result: {e}")
                return candidate
            logger.warning(f"Skipping {candidate.name}: details fetch failed: {e}")
            self.results.errors.append(f"Error fetching details for {candidate.name}: {e}")
            self._skip(stats)
            return None

    def _store(self, business: YelpBusiness, stats: LocalityResult) -> bool:
        if self.request.require_photos and not _has_photos(business):
            logger.warning(f"Skipping {business.name}: no photos")
            self._skip(stats)
            return False

        try:
            upsert_business(self.db, transform_yelp_business(business))
        except StorageError as e:
            self.results.errors.append(f"Error upserting {business.name}: {e.message}")
            self._skip(stats)
            return False

        stats.processed += 1
        self.results.processed += 1
        return True

    def _skip(self, stats: LocalityResult) -> None:
        stats.skipped += 1
        self.results.skipped += 1


async def run_ingestion(
    db: Session,
    yelp: YelpClient,
    request: IngestRequest,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> IngestResults:
    """Run the ingestion pipeline for every requested locality."""
    return await IngestionRun(db, yelp, request, sleep=sleep).run()
