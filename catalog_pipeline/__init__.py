# catalog_pipeline/__init__.py
