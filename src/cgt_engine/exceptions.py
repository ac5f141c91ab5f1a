"""Custom exception hierarchy for the capital-gains answer engine."""


class CGTEngineError(Exception):
    """Base exception for all engine errors."""


class InputValidationError(CGTEngineError):
    """Caller supplied an unusable request (e.g. empty query)."""


class ConfigurationError(CGTEngineError):
    """Error in system configuration, such as missing API credentials."""


class UpstreamFailure(CGTEngineError):
    """An external call failed after retries were exhausted."""

    stage = "upstream"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        if stage is not None:
            self.stage = stage


class SearchError(UpstreamFailure):
    """Error calling the web search API."""

    stage = "search"


class GenerationError(UpstreamFailure):
    """Error generating text."""

    stage = "generation"


class EmbeddingError(UpstreamFailure):
    """Error generating embeddings."""

    stage = "embedding"
