# catalog_pipeline/delegates/__init__.py

# This file makes the delegate classes directly available from the 'delegates' package.
# Instead of: from catalog_pipeline.delegates.browser_delegate import BrowserDelegate
# We can now use: from catalog_pipeline.delegates import BrowserDelegate

from .browser_delegate import BrowserDelegate
from .listing_extractor import ListingExtractor
from .detail_fetcher import DetailFetcher
from .file_manager_delegate import FileManagerDelegate
