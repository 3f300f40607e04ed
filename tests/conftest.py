"""
Root Pytest Fixtures.

Shared fixtures available to all test types: typed settings objects that
mirror config/settings/application.yaml, credentials, canned response
bodies, and an httpx.MockTransport factory that records every request.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from modules.completion.schemas import AuthCredentials
from modules.core.config_schema import (
    ApiSchema,
    OnEmptyInput,
    OnRequestError,
    RequestSchema,
    SchemaVariant,
    SessionSchema,
)
from modules.core.logging import setup_logging

TransportFactory = Callable[..., tuple[httpx.MockTransport, list[httpx.Request]]]


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def _quiet_logging() -> None:
    """Route structlog through stdlib with no console handler during tests."""
    setup_logging(level="WARNING", enable_console=False, enable_file_logging=False)


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def api_settings() -> ApiSchema:
    """API settings for the completion variant."""
    return ApiSchema(
        base_url="https://api.test",
        path="/v1/completions",
        schema_variant=SchemaVariant.COMPLETION,
        timeout_seconds=5,
        organization_header="OpenAI-Organization",
    )


@pytest.fixture
def chat_api_settings(api_settings: ApiSchema) -> ApiSchema:
    """API settings for the chat variant."""
    return api_settings.model_copy(update={"schema_variant": SchemaVariant.CHAT})


@pytest.fixture
def request_settings() -> RequestSchema:
    return RequestSchema(model="text-davinci-003", max_tokens=4000, temperature=1.0)


@pytest.fixture
def session_settings() -> SessionSchema:
    return SessionSchema(
        prompt="Ask:",
        response_label="ChatGPT:",
        log_file="ChatGPT.log",
        log_file_mode="0600",
        on_empty_input=OnEmptyInput.TERMINATE,
        on_request_error=OnRequestError.CONTINUE_SESSION,
    )


@pytest.fixture
def credentials() -> AuthCredentials:
    return AuthCredentials(token="sk-test", organization="")


# =============================================================================
# Response Bodies
# =============================================================================


@pytest.fixture
def text_body() -> dict[str, Any]:
    """Completion-variant body with a single choice."""
    return {"choices": [{"text": "Hi there"}]}


@pytest.fixture
def chat_body() -> dict[str, Any]:
    """Chat-variant body with a single choice."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1677652288,
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": "Hi there"},
            },
        ],
        "usage": {"prompt_tokens": 9, "completion_tokens": 12, "total_tokens": 21},
    }


# =============================================================================
# Transport Fixtures
# =============================================================================


@pytest.fixture
def make_transport() -> TransportFactory:
    """
    Build an httpx.MockTransport and the list it records requests into.

    Usage:
        transport, requests = make_transport(200, json={"choices": []})
        transport, requests = make_transport(error=httpx.ConnectError)
    """

    def factory(
        status_code: int = 200,
        json: Any = None,
        content: bytes = b"",
        error: type[httpx.RequestError] | None = None,
    ) -> tuple[httpx.MockTransport, list[httpx.Request]]:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if error is not None:
                raise error("simulated transport failure", request=request)
            if json is not None:
                return httpx.Response(status_code, json=json)
            return httpx.Response(status_code, content=content)

        return httpx.MockTransport(handler), requests

    return factory
