# catalog_pipeline/pipeline/steps.py
import logging
from pathlib import Path
from typing import Optional

from rich.pretty import pprint

from .. import config
from ..config import PipelineSettings
from ..delegates import FileManagerDelegate, ListingExtractor, DetailFetcher
from ..errors import ArtifactFault
from ..models import DetailBatch
from .ranking import rank_products

logger = logging.getLogger(__name__)


def build_listing_extractor(settings: PipelineSettings) -> ListingExtractor:
    return ListingExtractor(
        item_selectors=config.LISTING_SELECTORS,
        reveal_selector=config.REVEAL_SELECTOR,
        reveal_attempts=settings.reveal_attempts,
        settle_delay_ms=settings.settle_delay_ms,
        settle_mode=settings.settle_mode,
        poll_interval_ms=settings.poll_interval_ms,
        navigation_timeout_ms=settings.navigation_timeout_ms,
        query_timeout_ms=settings.query_timeout_ms,
    )


def build_detail_fetcher(settings: PipelineSettings) -> DetailFetcher:
    return DetailFetcher(
        detail_selectors=config.DETAIL_SELECTORS,
        navigation_timeout_ms=settings.navigation_timeout_ms,
        query_timeout_ms=settings.query_timeout_ms,
    )


async def step_1_scrape_listings(browser, file_manager: FileManagerDelegate, settings: PipelineSettings) -> Optional[Path]:
    """
    Step 1: Scrapes the listing page through its "load more" button and saves every
    harvested row. Returns the path of the saved rows, or None if nothing was scraped.
    """
    logger.info("--- STEP 1: SCRAPING LISTINGS ---")
    logger.info("Target listing page: %s", settings.target_url)

    extractor = build_listing_extractor(settings)
    page = await browser.new_page()
    products = await extractor.extract(page, settings.target_url)

    logger.info("Collected %d rows over %d harvests (%d clicks).", len(products), extractor.harvests, extractor.clicks)
    if not products:
        logger.error("No products were scraped from %s. Nothing to save.", settings.target_url)
        return None

    saved_path = file_manager.save_listing_rows(products, settings.target_url)
    logger.info("--- STEP 1 COMPLETE ---")
    return saved_path


async def step_2_enrich_top_products(browser, file_manager: FileManagerDelegate, settings: PipelineSettings) -> Optional[DetailBatch]:
    """
    Step 2: Reloads the saved rows, picks the top_n products with distinct prices
    and fetches their product pages. Returns None if the saved rows cannot be used.
    """
    logger.info("--- STEP 2: RANKING AND ENRICHING TOP %d PRODUCTS ---", settings.top_n)
    try:
        records = file_manager.load_listing_rows()
    except ArtifactFault as e:
        logger.error("Cannot rank products: %s", e)
        return None

    top_products = rank_products(records, settings.top_n)
    logger.info("Selected %d products with distinct prices.", len(top_products))
    if logger.isEnabledFor(logging.DEBUG):
        pprint(top_products, max_length=10, max_string=100)

    fetcher = build_detail_fetcher(settings)
    batch = await fetcher.fetch_all(browser, top_products)

    logger.info("--- STEP 2 COMPLETE ---")
    return batch
