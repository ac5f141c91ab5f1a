"""Credential checks and error classification for the external model providers."""

import httpx
import openai
import pytest
from google.genai import errors

from cgt_engine.config.settings import Settings
from cgt_engine.embeddings.openai_embedder import OpenAIEmbedder, is_transient_openai_error
from cgt_engine.exceptions import ConfigurationError, EmbeddingError
from cgt_engine.generation.gemini_provider import GeminiTextGenerator, is_transient_genai_error


def _response(status):
    return httpx.Response(status, request=httpx.Request("POST", "https://api.example.com"))


class _Item:
    def __init__(self, embedding):
        self.embedding = embedding


class _Response:
    def __init__(self, data):
        self.data = data


class RecordingEmbeddings:
    def __init__(self, exc=None):
        self.kwargs = []
        self.exc = exc

    async def create(self, **kwargs):
        self.kwargs.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return _Response([_Item([0.1, 0.2]) for _ in kwargs["input"]])


class RecordingClient:
    def __init__(self, exc=None):
        self.embeddings = RecordingEmbeddings(exc)


def test_embedder_requires_key():
    with pytest.raises(ConfigurationError):
        OpenAIEmbedder(Settings(openai_api_key="", _env_file=None))


def test_generator_requires_key():
    with pytest.raises(ConfigurationError):
        GeminiTextGenerator(Settings(google_api_key="", _env_file=None))


async def test_embedder_requests_configured_dimensions(settings):
    embedder = OpenAIEmbedder(settings)
    embedder._client = RecordingClient()
    vectors = await embedder.embed_texts(["a", "b"])
    assert vectors == [[0.1, 0.2], [0.1, 0.2]]
    sent = embedder._client.embeddings.kwargs[0]
    assert sent["dimensions"] == settings.embedding_dimensions
    assert sent["model"] == settings.embedding_model


async def test_embedder_auth_failure_not_retried(settings):
    embedder = OpenAIEmbedder(settings)
    exc = openai.AuthenticationError("bad key", response=_response(401), body=None)
    embedder._client = RecordingClient(exc)
    with pytest.raises(EmbeddingError):
        await embedder.embed_query("q")
    assert len(embedder._client.embeddings.kwargs) == 1


def test_openai_error_classification():
    assert not is_transient_openai_error(openai.AuthenticationError("m", response=_response(401), body=None))
    assert not is_transient_openai_error(openai.BadRequestError("m", response=_response(400), body=None))
    assert is_transient_openai_error(openai.RateLimitError("m", response=_response(429), body=None))
    assert is_transient_openai_error(openai.InternalServerError("m", response=_response(500), body=None))
    assert is_transient_openai_error(openai.APIConnectionError(request=httpx.Request("POST", "https://x")))
    assert is_transient_openai_error(TimeoutError())


def test_genai_error_classification():
    assert is_transient_genai_error(errors.ServerError(503, {}))
    assert is_transient_genai_error(errors.ClientError(429, {}))
    assert not is_transient_genai_error(errors.ClientError(403, {}))
    assert is_transient_genai_error(TimeoutError())
    assert not is_transient_genai_error(ValueError("x"))
