"""
Completion Client.

Sends one POST per prompt to the completion API and turns the answer into
a list of DisplayChoice. One attempt per call: failures are raised to the
caller as CompletionError subclasses and never retried here.

Usage:
    with CompletionClient(credentials, api, request) as client:
        for choice in client.complete("Hello"):
            print(choice.render())
"""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError

from modules.completion.schemas import (
    RESPONSE_SCHEMAS,
    ApiErrorBody,
    AuthCredentials,
    CompletionRequest,
    CompletionResponse,
    DisplayChoice,
)
from modules.core.config_schema import ApiSchema, RequestSchema
from modules.core.exceptions import (
    APIError,
    DecodingError,
    EncodingError,
    TransportError,
    ValidationError,
)
from modules.core.logging import get_logger, log_with_source

logger = get_logger(__name__)

APPLICATION_JSON = "application/json"


def normalize_prompt(prompt: str) -> str:
    """Trim surrounding whitespace. Applying it twice changes nothing."""
    return prompt.strip()


class CompletionClient:
    """
    HTTP client for the completion API.

    Features:
    - Bearer authorization and optional organization header on every request
    - Response parsed into the schema variant chosen at construction
    - Non-2xx statuses classified as APIError whatever the body says
    - Debug traces of request and response via structured logging

    Args:
        credentials: Token and organization used for every request.
        api: Endpoint, schema variant, timeout and organization header name.
        request: Model, max_tokens and temperature sent with every prompt.
        transport: Optional httpx transport, e.g. httpx.MockTransport in tests.
    """

    def __init__(
        self,
        credentials: AuthCredentials,
        api: ApiSchema,
        request: RequestSchema,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self.api = api
        self.request_defaults = request
        self.schema = RESPONSE_SCHEMAS[api.schema_variant]
        self._client = httpx.Client(
            base_url=api.base_url.rstrip("/"),
            timeout=api.timeout_seconds,
            transport=transport,
        )

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "CompletionClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def build_request(self, prompt: str) -> CompletionRequest:
        """Build the request body for a prompt using the configured defaults."""
        text = normalize_prompt(prompt)
        if not text:
            raise ValidationError("Prompt must not be empty")
        return CompletionRequest(
            prompt=text,
            model=self.request_defaults.model,
            max_tokens=self.request_defaults.max_tokens,
            temperature=self.request_defaults.temperature,
        )

    def build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": APPLICATION_JSON,
            "Content-Type": APPLICATION_JSON,
            "Authorization": f"Bearer {self.credentials.token.get_secret_value()}",
        }
        if self.credentials.organization:
            headers[self.api.organization_header] = self.credentials.organization
        return headers

    def encode(self, body: CompletionRequest) -> bytes:
        try:
            return body.model_dump_json().encode("utf-8")
        except (PydanticSerializationError, ValueError) as e:
            raise EncodingError(f"Could not encode request: {e}") from e

    def decode(self, response: httpx.Response) -> CompletionResponse:
        try:
            return self.schema.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise DecodingError(
                f"Response is not a valid {self.api.schema_variant.value} body: {e}"
            ) from e

    def complete(self, prompt: str) -> list[DisplayChoice]:
        """
        Send one prompt and return the choices of the answer.

        Raises:
            ValidationError: prompt is empty after trimming
            EncodingError: request body could not be serialized
            TransportError: network failure or timeout
            APIError: status outside 2xx
            DecodingError: 2xx body does not match the schema variant
        """
        body = self.build_request(prompt)
        payload = self.encode(body)

        log_with_source(
            logger,
            "client",
            "debug",
            "Completion request",
            method="POST",
            base_url=self.api.base_url,
            path=self.api.path,
            timeout=self.api.timeout_seconds,
            schema_variant=self.api.schema_variant.value,
            organization=self.credentials.organization or None,
            body=body.model_dump(),
        )

        try:
            response = self._client.post(
                self.api.path,
                content=payload,
                headers=self.build_headers(),
            )
        except httpx.RequestError as e:
            log_with_source(
                logger,
                "client",
                "error",
                "Completion request failed",
                path=self.api.path,
                error=str(e),
            )
            raise TransportError(f"Request to {self.api.path} failed: {e!r}") from e

        log_with_source(
            logger,
            "client",
            "debug",
            "Completion response",
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers),
            body=response.text,
        )

        if not response.is_success:
            raise APIError(
                response.status_code,
                response.reason_phrase,
                detail=_error_detail(response),
            )

        parsed = self.decode(response)
        log_with_source(
            logger,
            "client",
            "debug",
            "Completion parsed",
            response=parsed.model_dump(),
        )
        return parsed.display_choices()


def _error_detail(response: httpx.Response) -> str | None:
    """Message from an {"error": {"message": ...}} body, if there is one."""
    try:
        envelope = ApiErrorBody.model_validate_json(response.content)
    except PydanticValidationError:
        return None
    return envelope.error.message or None


def client_options(client: CompletionClient) -> dict[str, Any]:
    """Non-secret view of a client's settings, for verbose output."""
    return {
        "base_url": str(client.api.base_url),
        "path": client.api.path,
        "schema_variant": client.api.schema_variant.value,
        "timeout_seconds": client.api.timeout_seconds,
        "model": client.request_defaults.model,
        "max_tokens": client.request_defaults.max_tokens,
        "temperature": client.request_defaults.temperature,
        "organization": client.credentials.organization or None,
    }
