# catalog_pipeline/delegates/listing_extractor.py
import logging
from typing import Dict, List, Optional

from ..errors import QueryFault
from ..models import ListingRecord
from .browser_delegate import navigate, run_query
from .page_queries import LISTING_QUERY, REVEAL_INTERACTABLE_QUERY, ITEM_COUNT_QUERY

logger = logging.getLogger(__name__)


class ListingExtractor:
    """
    Scrapes a listing page that reveals more products through a "load more" button.

    The page is harvested once after loading, then the button is clicked up to
    reveal_attempts times with a harvest after each click. Every harvest returns
    all cards currently rendered, so the result contains repeats; deduplication
    happens later when ranking.
    """
    def __init__(
        self,
        item_selectors: Dict[str, str],
        reveal_selector: str,
        reveal_attempts: int = 4,
        settle_delay_ms: int = 2000,
        settle_mode: str = "fixed",
        poll_interval_ms: int = 250,
        navigation_timeout_ms: int = 60000,
        query_timeout_ms: Optional[int] = None,
    ):
        self.item_selectors = item_selectors
        self.reveal_selector = reveal_selector
        self.reveal_attempts = reveal_attempts
        self.settle_delay_ms = settle_delay_ms
        self.settle_mode = settle_mode
        self.poll_interval_ms = poll_interval_ms
        self.navigation_timeout_ms = navigation_timeout_ms
        self.query_timeout_ms = query_timeout_ms
        self.clicks = 0
        self.harvests = 0

    async def extract(self, page, url: str) -> List[ListingRecord]:
        """
        Runs the reveal-and-harvest loop on page and always closes it.
        On any fault the records collected up to that point are returned.
        """
        self.clicks = 0
        self.harvests = 0
        all_products: List[ListingRecord] = []
        try:
            await navigate(page, url, self.navigation_timeout_ms)

            initial = await self._harvest(page, url)
            all_products.extend(initial)
            logger.info("Initial harvest: %d products", len(initial))

            while self.clicks < self.reveal_attempts:
                button = await page.query_selector(self.reveal_selector)
                if button is None:
                    logger.info("Load more button '%s' not found after %d click(s); no more pages.", self.reveal_selector, self.clicks)
                    break

                clickable = await page.eval_on_selector(self.reveal_selector, REVEAL_INTERACTABLE_QUERY)
                if not clickable:
                    logger.info("Load more button is not clickable (hidden, zero-sized or disabled); stopping after %d click(s).", self.clicks)
                    break

                before = await self._count_items(page)
                await button.click()
                self.clicks += 1
                logger.debug("Clicked load more button (%d/%d)", self.clicks, self.reveal_attempts)

                await self._settle(page, before)

                new_products = await self._harvest(page, url)
                logger.info("Harvest after click %d: %d products", self.clicks, len(new_products))
                all_products.extend(new_products)

            if self.clicks == self.reveal_attempts:
                logger.debug("Reached the click limit of %d.", self.reveal_attempts)
        except Exception as e:
            logger.error("Scraping %s stopped after %d click(s): %s. Keeping %d products collected so far.",
                         url, self.clicks, e, len(all_products), exc_info=True)
        finally:
            await page.close()
            logger.debug("Listing page closed.")

        return all_products

    async def _harvest(self, page, url: str) -> List[ListingRecord]:
        rows = await run_query(page, LISTING_QUERY, self.item_selectors, "listing", self.query_timeout_ms, url)
        self.harvests += 1
        if not isinstance(rows, list):
            raise QueryFault("listing", url, f"expected a list of records, got {type(rows).__name__}")
        try:
            return [ListingRecord.from_projection(row) for row in rows]
        except (AttributeError, TypeError) as e:
            raise QueryFault("listing", url, f"unexpected record shape: {e}") from e

    async def _count_items(self, page) -> int:
        if self.settle_mode != "poll":
            return 0
        return await page.eval_on_selector_all(self.item_selectors["item"], ITEM_COUNT_QUERY)

    async def _settle(self, page, count_before: int):
        """Gives the page time to render the cards revealed by the last click."""
        if self.settle_mode != "poll":
            await page.wait_for_timeout(self.settle_delay_ms)
            return

        waited = 0
        while waited < self.settle_delay_ms:
            step = min(self.poll_interval_ms, self.settle_delay_ms - waited)
            await page.wait_for_timeout(step)
            waited += step
            count = await page.eval_on_selector_all(self.item_selectors["item"], ITEM_COUNT_QUERY)
            if count > count_before:
                logger.debug("Item count grew from %d to %d after %d ms", count_before, count, waited)
                return
        logger.debug("Item count did not grow within %d ms", self.settle_delay_ms)
