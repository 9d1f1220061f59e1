"""
Tests for DetailFetcher: default filling, ordering and per-product fault isolation.
"""

import pytest
from playwright.async_api import Error as PlaywrightError

from catalog_pipeline.config import DETAIL_SELECTORS
from catalog_pipeline.delegates import DetailFetcher
from catalog_pipeline.errors import NavigationFault, QueryFault
from catalog_pipeline.models import RankedProduct, DetailRecord, NOT_AVAILABLE
from conftest import FakeBrowser


def product(i, price):
    return RankedProduct(name=f"P{i}", price=price, image=f"https://shop.test/img/{i}.png",
                         link=f"https://shop.test/product/{i}")


def document(i):
    return {"title": f"Title {i}", "price": f"${i}0.00", "description": f"About {i}",
            "sku": f"SKU-{i}", "category": "Category: Tops"}


@pytest.fixture
def fetcher():
    return DetailFetcher(DETAIL_SELECTORS, navigation_timeout_ms=5000, query_timeout_ms=None)


@pytest.mark.asyncio
async def test_missing_description_defaults_to_not_available(fetcher):
    p = product(1, 10.0)
    doc = document(1)
    del doc["description"]
    browser = FakeBrowser({p.link: doc})

    batch = await fetcher.fetch_all(browser, [p])

    detail = batch.records[0]
    assert detail.description == NOT_AVAILABLE
    assert detail.title == "Title 1"
    assert detail.sku == "SKU-1"
    assert detail.category == "Category: Tops"


@pytest.mark.asyncio
async def test_results_follow_input_order_not_completion_order(fetcher):
    products = [product(i, 100.0 - i) for i in range(3)]
    browser = FakeBrowser(
        {p.link: document(i) for i, p in enumerate(products)},
        delays={products[0].link: 0.03, products[1].link: 0.01, products[2].link: 0.0},
    )

    batch = await fetcher.fetch_all(browser, products)

    assert browser.completion_order == [products[2].link, products[1].link, products[0].link]
    assert [d.title for d in batch.records] == ["Title 0", "Title 1", "Title 2"]
    assert [o.product for o in batch.outcomes] == products


@pytest.mark.asyncio
async def test_every_page_is_closed(fetcher):
    products = [product(i, float(i)) for i in range(3)]
    browser = FakeBrowser(
        {products[0].link: document(0), products[1].link: PlaywrightError("boom"), products[2].link: document(2)},
        goto_errors={products[2].link: PlaywrightError("net::ERR_CONNECTION_RESET")},
    )

    await fetcher.fetch_all(browser, products)

    assert len(browser.pages) == 3
    assert all(page.closed for page in browser.pages)


@pytest.mark.asyncio
async def test_one_failure_does_not_cancel_the_others(fetcher):
    products = [product(i, float(i)) for i in range(3)]
    browser = FakeBrowser(
        {p.link: document(i) for i, p in enumerate(products)},
        goto_errors={products[1].link: PlaywrightError("Timeout 5000ms exceeded")},
    )

    batch = await fetcher.fetch_all(browser, products)

    assert [o.ok for o in batch.outcomes] == [True, False, True]
    assert isinstance(batch.failures[0].error, NavigationFault)
    assert batch.failures[0].product == products[1]
    assert [d.title for d in batch.records] == ["Title 0", "Title 2"]


@pytest.mark.asyncio
async def test_query_failure_is_reported_as_query_fault(fetcher):
    p = product(1, 1.0)
    browser = FakeBrowser({p.link: PlaywrightError("Execution context was destroyed")})

    batch = await fetcher.fetch_all(browser, [p])

    assert isinstance(batch.outcomes[0].error, QueryFault)


@pytest.mark.asyncio
async def test_without_isolation_first_fault_aborts_the_batch(fetcher):
    products = [product(i, float(i)) for i in range(2)]
    browser = FakeBrowser(
        {p.link: document(i) for i, p in enumerate(products)},
        goto_errors={products[0].link: PlaywrightError("net::ERR_ABORTED")},
    )

    with pytest.raises(NavigationFault):
        await fetcher.fetch_all(browser, products, isolate_failures=False)


@pytest.mark.asyncio
async def test_empty_selection_fetches_nothing(fetcher):
    browser = FakeBrowser({})

    batch = await fetcher.fetch_all(browser, [])

    assert len(batch) == 0
    assert browser.pages == []


def test_detail_record_from_projection_fills_every_missing_field():
    detail = DetailRecord.from_projection({"title": "Only title", "price": "  "})

    assert detail == DetailRecord(title="Only title")
    assert detail.price == NOT_AVAILABLE


@pytest.mark.asyncio
async def test_slow_product_page_times_out_as_query_fault():
    products = [product(0, 2.0), product(1, 1.0)]
    browser = FakeBrowser({p.link: document(i) for i, p in enumerate(products)}, delays={products[0].link: 1.0})
    fetcher = DetailFetcher(DETAIL_SELECTORS, navigation_timeout_ms=5000, query_timeout_ms=20)

    batch = await fetcher.fetch_all(browser, products)

    assert [o.ok for o in batch.outcomes] == [False, True]
    assert isinstance(batch.outcomes[0].error, QueryFault)
    assert "timed out after 20 ms" in str(batch.outcomes[0].error)
    assert all(page.closed for page in browser.pages)
