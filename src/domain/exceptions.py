class DocsSiteException(Exception):
    """Base exception for all docs-site pipeline errors."""
    pass

class SourceReadException(DocsSiteException):
    """Raised when a page's source file exists but cannot be read."""
    def __init__(self, path: str, message: str = "Failed to read page source."):
        self.path = path
        super().__init__(f"{message} Path: {path}")

class RateLimitExceededException(DocsSiteException):
    """Raised when the GitHub REST rate limit is hit."""
    def __init__(self, reset_at: str, message: str = "GitHub API rate limit exceeded."):
        self.reset_at = reset_at
        super().__init__(f"{message} Resets at: {reset_at}")

class StarMetricUnavailableException(DocsSiteException):
    """Raised when the star count cannot be fetched after all retries."""
    pass

class DatabaseException(DocsSiteException):
    """Raised when a star metric cache operation fails."""
    pass
