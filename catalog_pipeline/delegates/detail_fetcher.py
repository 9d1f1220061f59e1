# catalog_pipeline/delegates/detail_fetcher.py
import asyncio
import logging
from typing import Dict, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from ..errors import ScrapeFault
from ..models import RankedProduct, DetailRecord, DetailOutcome, DetailBatch
from .browser_delegate import navigate, run_query
from .page_queries import DETAIL_QUERY

logger = logging.getLogger(__name__)


class DetailFetcher:
    """Opens product pages concurrently and reads the detail fields from each."""
    def __init__(self, detail_selectors: Dict[str, str], navigation_timeout_ms: int = 60000, query_timeout_ms: Optional[int] = None):
        self.detail_selectors = detail_selectors
        self.navigation_timeout_ms = navigation_timeout_ms
        self.query_timeout_ms = query_timeout_ms

    async def fetch_details(self, browser, product: RankedProduct) -> DetailRecord:
        """Fetches one product page on its own page object, which is closed before returning."""
        page = await browser.new_page()
        try:
            await navigate(page, product.link, self.navigation_timeout_ms)
            data = await run_query(page, DETAIL_QUERY, self.detail_selectors, "detail", self.query_timeout_ms, product.link)
            detail = DetailRecord.from_projection(data if isinstance(data, dict) else None)
            logger.debug("Fetched details for %s: %s", product.link, detail)
            return detail
        finally:
            await page.close()

    async def _fetch_outcome(self, browser, product: RankedProduct) -> DetailOutcome:
        try:
            detail = await self.fetch_details(browser, product)
        except (ScrapeFault, PlaywrightError) as e:
            logger.error("Failed to fetch details for '%s' (%s): %s", product.name, product.link, e)
            return DetailOutcome(product=product, error=e)
        return DetailOutcome(product=product, detail=detail)

    async def fetch_all(self, browser, products: Sequence[RankedProduct], isolate_failures: bool = True) -> DetailBatch:
        """
        Fetches every product at once. outcomes[i] always belongs to products[i].

        With isolate_failures a failing page is recorded in its outcome and the
        other fetches carry on. Without it the first fault propagates and the
        whole batch is lost.
        """
        logger.info("Fetching details for %d products concurrently...", len(products))
        if isolate_failures:
            outcomes = await asyncio.gather(*(self._fetch_outcome(browser, p) for p in products))
        else:
            details = await asyncio.gather(*(self.fetch_details(browser, p) for p in products))
            outcomes = [DetailOutcome(product=p, detail=d) for p, d in zip(products, details)]

        batch = DetailBatch(outcomes=list(outcomes))
        if batch.failures:
            logger.warning("%d of %d detail fetches failed.", len(batch.failures), len(batch))
        else:
            logger.info("All %d detail fetches succeeded.", len(batch))
        return batch
