# catalog_pipeline/models/__init__.py

# This file makes the model classes directly available from the 'models' package.
# Instead of: from catalog_pipeline.models.product_models import ListingRecord
# We can now use: from catalog_pipeline.models import ListingRecord

from .product_models import (
    NOT_AVAILABLE,
    ListingRecord,
    RankedProduct,
    DetailRecord,
    DetailOutcome,
    DetailBatch,
)
