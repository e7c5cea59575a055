"""Exception taxonomy for archgen."""


class ArchgenError(Exception):
    """Base exception for all archgen errors."""

    pass


class ConfigurationError(ArchgenError):
    """Raised for missing credentials, bad repository references or settings."""

    pass


class SourceError(ArchgenError):
    """Raised when a file or directory listing cannot be read."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class RenderError(ArchgenError):
    """Raised when a renderer cannot produce its output."""

    def __init__(self, message: str, format: str | None = None):
        self.format = format
        super().__init__(message)
