# catalog_pipeline/errors.py
from typing import Optional


class PipelineFault(Exception):
    """Base class for every fault raised by the catalog pipeline."""


class ScrapeFault(PipelineFault):
    """A browser-side operation failed."""


class NavigationFault(ScrapeFault):
    """Navigating a page to a URL failed or timed out."""
    def __init__(self, url: str, reason: str):
        super().__init__(f"Navigation to {url} failed: {reason}")
        self.url = url
        self.reason = reason


class QueryFault(ScrapeFault):
    """A document projection raised instead of returning records."""
    def __init__(self, query: str, url: Optional[str], reason: str):
        super().__init__(f"Query '{query}' failed on {url or 'current page'}: {reason}")
        self.query = query
        self.url = url
        self.reason = reason


class ArtifactFault(PipelineFault):
    """The persisted listing artifact is missing, unsupported or corrupt."""


class MalformedRowFault(ArtifactFault):
    """A persisted row has fewer than four fields after splitting."""
    def __init__(self, line_no: int, line: str):
        super().__init__(f"Row {line_no} has fewer than 4 fields: {line!r}")
        self.line_no = line_no
        self.line = line


class MalformedPriceFault(PipelineFault, ValueError):
    """A raw price cannot be parsed after stripping non-numeric characters."""
    def __init__(self, raw: str):
        super().__init__(f"Cannot parse price from {raw!r}")
        self.raw = raw


class ConfigFault(PipelineFault, ValueError):
    """Configuration contains an unknown option or an invalid value."""
