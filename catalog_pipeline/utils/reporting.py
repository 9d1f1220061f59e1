# catalog_pipeline/utils/reporting.py
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import DetailBatch


def build_detail_table(batch: DetailBatch) -> Table:
    """One row per enriched product, in ranking order. Failed fetches show their error."""
    table = Table(title="Top Highest-Priced Product Details", show_lines=True)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Price")
    table.add_column("SKU")
    table.add_column("Category")
    table.add_column("Description", overflow="fold")

    for position, outcome in enumerate(batch.outcomes, start=1):
        if outcome.ok:
            detail = outcome.detail
            table.add_row(str(position), *(escape(value) for value in
                          (detail.title, detail.price, detail.sku, detail.category, detail.description)))
        else:
            table.add_row(str(position), escape(outcome.product.name), f"{outcome.product.price:.2f}", "-", "-",
                          f"[red]failed: {escape(str(outcome.error))}[/red]")
    return table


def render_detail_batch(batch: DetailBatch, console: Console):
    console.print(build_detail_table(batch))
