class SongColumnsError(Exception):
    """Base exception for songcolumns."""


class TemplateError(SongColumnsError):
    """Raised when a template configuration is invalid."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid template field {field!r}: {reason}")


class LayoutError(SongColumnsError):
    """Raised when a layout pass is requested with invalid inputs."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot lay out song: {reason}")


class SegmentError(SongColumnsError):
    """Raised when a line's chord segments are malformed."""

    def __init__(self, position: int, reason: str):
        self.position = position
        self.reason = reason
        super().__init__(f"Bad segment at position {position}: {reason}")


class FetchError(SongColumnsError):
    """Raised when an HTTP request fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} fetching {url}")


class ParseError(SongColumnsError):
    """Raised when expected song content cannot be extracted from a source."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Parse error for {source}: {reason}")


class UnsupportedSourceError(SongColumnsError):
    """Raised when no importer matches the given source."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"No importer found for: {source}")
