"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UpstreamUnavailableError(ApplicationError):
    """Raised when the backend system of record cannot be reached or times out."""


class DiffStoreError(ApplicationError):
    """Raised when the diff store cannot complete an append or lookup. Never used for "not found"."""
