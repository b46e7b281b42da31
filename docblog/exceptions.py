class DocblogError(Exception):
    """Base exception for all docblog errors."""

    def __init__(self, message: str):
        super().__init__(message)


class AIRequestError(DocblogError):
    """An AI call failed: transport error, timeout, rejected request or retries exhausted."""

    def __init__(self, message: str, *, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class StructuredOutputError(DocblogError):
    """AI output is not a JSON object or misses required keys."""

    def __init__(self, message: str, *, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class DocumentFetchError(DocblogError):
    """The document source could not be fetched or parsed."""

    def __init__(self, document_id: str, message: str):
        super().__init__(f"Document {document_id!r}: {message}")
        self.document_id = document_id


class ImageUploadError(DocblogError):
    """An image could not be downloaded or stored."""


class StoreError(DocblogError):
    """A CMS request failed."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedStoryError(DocblogError):
    """No translation schema is registered for the story's component."""

    def __init__(self, component: str | None):
        super().__init__(f"No translation schema registered for component {component!r}")
        self.component = component
