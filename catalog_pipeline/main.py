# catalog_pipeline/main.py
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from . import config
from .config import PipelineSettings
from .delegates import BrowserDelegate, FileManagerDelegate
from .pipeline.steps import step_1_scrape_listings, step_2_enrich_top_products
from .utils.reporting import render_detail_batch

logger = logging.getLogger(__name__)


async def main(steps_to_run: List[int], settings: PipelineSettings, har_output_path: Optional[Path] = None,
               console: Optional[Console] = None) -> bool:
    """
    The main orchestrator. Step 1 scrapes and saves listing rows, step 2 ranks the
    saved rows and enriches the top products; either can be run on its own.
    Returns True when every requested step succeeded.
    """
    file_manager = FileManagerDelegate(base_path=settings.data_path, listings_filename=config.LISTINGS_FILENAME)

    # One browser serves both steps and is closed only after every page is done.
    async with BrowserDelegate(
        user_agent=config.USER_AGENT,
        viewport=config.VIEWPORT,
        headless=settings.headless,
        har_output_path=har_output_path,
    ) as browser:
        if 1 in steps_to_run:
            saved_path = await step_1_scrape_listings(browser, file_manager, settings)
            if saved_path is None:
                logger.error("Step 1 failed to scrape any listings. Cannot proceed to Step 2.")
                return False
        else:
            logger.info("Step 1 skipped. Step 2 will use the rows saved by an earlier run: %s", file_manager.listings_path)

        if 2 in steps_to_run:
            batch = await step_2_enrich_top_products(browser, file_manager, settings)
            if batch is None:
                return False
            render_detail_batch(batch, console or Console())
            if batch.outcomes and not batch.successes:
                logger.error("Step 2 failed: none of the %d product pages could be fetched.", len(batch))
                return False
            if batch.failures:
                logger.warning("Step 2 finished with %d failed product page(s).", len(batch.failures))
        else:
            logger.info("Step 2 skipped as per --steps argument.")

    logger.info("Main pipeline process finished.")
    return True
