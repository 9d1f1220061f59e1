# catalog_pipeline/pipeline/__init__.py

# This file makes the step functions directly available from the 'pipeline' package.
from .ranking import parse_price, rank_products
from .steps import step_1_scrape_listings, step_2_enrich_top_products
