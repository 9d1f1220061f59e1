# catalog_pipeline/utils/__init__.py
