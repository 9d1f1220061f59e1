# conftest.py
# Puts the repository root on sys.path so `catalog_pipeline` imports without an install,
# and provides in-memory stand-ins for Playwright pages and the browser delegate.

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
ROOT_STR = str(ROOT)

if ROOT_STR not in sys.path:
    sys.path.insert(0, ROOT_STR)


def make_card(name: str, price: str, n: int = 0) -> Dict[str, str]:
    return {
        "name": name,
        "price": price,
        "image": f"https://shop.test/img/{name.lower()}{n}.png",
        "link": f"https://shop.test/product/{name.lower()}{n}",
    }


class FakeButton:
    def __init__(self, page: "FakeListingPage"):
        self.page = page

    async def click(self):
        self.page.clicks += 1


class FakeListingPage:
    """
    Listing page double. harvests[i] is what the i-th evaluate() returns (the last
    entry repeats). clickable(clicks_so_far) decides whether the button is interactable.
    """
    def __init__(self, harvests: List[List[Dict]], clickable=lambda clicks: True, button_present=True,
                 goto_error: Optional[Exception] = None, evaluate_error_at: Optional[int] = None,
                 evaluate_error: Optional[Exception] = None, item_counts: Optional[List[int]] = None,
                 slow_evaluate_at: Optional[int] = None, slow_evaluate_seconds: float = 1.0):
        self.harvests = harvests
        self.clickable = clickable
        self.button_present = button_present
        self.goto_error = goto_error
        self.evaluate_error_at = evaluate_error_at
        self.evaluate_error = evaluate_error
        self.slow_evaluate_at = slow_evaluate_at
        self.slow_evaluate_seconds = slow_evaluate_seconds
        self.item_counts = item_counts or []
        self.goto_calls = []
        self.evaluate_calls = 0
        self.clicks = 0
        self.waits = []
        self.count_calls = 0
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if self.goto_error:
            raise self.goto_error

    async def evaluate(self, script, arg=None):
        index = self.evaluate_calls
        self.evaluate_calls += 1
        if index == self.slow_evaluate_at:
            await asyncio.sleep(self.slow_evaluate_seconds)
        if self.evaluate_error_at is not None and index == self.evaluate_error_at:
            raise self.evaluate_error
        return self.harvests[min(index, len(self.harvests) - 1)]

    async def query_selector(self, selector):
        return FakeButton(self) if self.button_present else None

    async def eval_on_selector(self, selector, script):
        return self.clickable(self.clicks)

    async def eval_on_selector_all(self, selector, script):
        index = self.count_calls
        self.count_calls += 1
        if not self.item_counts:
            return 0
        return self.item_counts[min(index, len(self.item_counts) - 1)]

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def close(self):
        self.closed = True


class FakeDetailPage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.url = None
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.url = url
        error = self.browser.goto_errors.get(url)
        if error:
            raise error

    async def evaluate(self, script, arg=None):
        await asyncio.sleep(self.browser.delays.get(self.url, 0))
        self.browser.completion_order.append(self.url)
        document = self.browser.documents[self.url]
        if isinstance(document, Exception):
            raise document
        return document

    async def close(self):
        self.closed = True


class FakeBrowser:
    """Hands out FakeDetailPage objects serving documents keyed by URL."""
    def __init__(self, documents: Dict[str, object], delays: Optional[Dict[str, float]] = None,
                 goto_errors: Optional[Dict[str, Exception]] = None, listing_page: Optional[FakeListingPage] = None):
        self.documents = documents
        self.delays = delays or {}
        self.goto_errors = goto_errors or {}
        self.listing_page = listing_page
        self.pages: List = []
        self.completion_order: List[str] = []
        self.exited = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited = True

    async def new_page(self):
        if self.listing_page is not None and self.listing_page not in self.pages:
            page = self.listing_page
        else:
            page = FakeDetailPage(self)
        self.pages.append(page)
        return page


@pytest.fixture
def card():
    return make_card
