# catalog_pipeline/delegates/page_queries.py

# JavaScript projections evaluated against the rendered document with page.evaluate().
# They only read the DOM; a missing element yields "N/A" for that field instead of throwing.

LISTING_QUERY = """
(selectors) => {
    const items = document.querySelectorAll(selectors.item);
    return Array.from(items).map((item) => ({
        name: item.querySelector(selectors.name)?.innerText || "N/A",
        price: item.querySelector(selectors.price)?.innerText || "N/A",
        image: item.querySelector(selectors.image)?.src || "N/A",
        link: item.querySelector(selectors.link)?.href || "N/A",
    }));
}
"""

DETAIL_QUERY = """
(selectors) => {
    const text = (selector) => document.querySelector(selector)?.innerText || "N/A";
    const result = {};
    for (const [field, selector] of Object.entries(selectors)) {
        result[field] = text(selector);
    }
    return result;
}
"""

# Evaluated with page.eval_on_selector() on the reveal control.
REVEAL_INTERACTABLE_QUERY = """
(button) => button.offsetWidth > 0 && button.offsetHeight > 0 && !button.disabled
"""

# Evaluated with page.eval_on_selector_all() on the listing items.
ITEM_COUNT_QUERY = "(items) => items.length"
