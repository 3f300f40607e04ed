"""
Completion Schemas.

Request and response bodies for the completion API.

Two response shapes exist and a client expects exactly one of them, chosen
from configuration when the client is built:

    completion  TextCompletionResponse  {"choices": [{"text": ...}]}
    chat        ChatCompletionResponse  {"id": ..., "choices": [{"message": ...}], "usage": ...}

Both expose display_choices(), so callers never branch on the variant.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from modules.core.config_schema import SchemaVariant

NO_CONTENT_MARKER = "<no content>"


class AuthCredentials(BaseModel):
    """Bearer token and optional organization, fixed for the process lifetime."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr
    organization: str = ""

    @field_validator("token")
    @classmethod
    def _token_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("token must not be empty")
        return value


class CompletionRequest(BaseModel):
    """Body of one completion request."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    model: str
    max_tokens: int
    temperature: float


class DisplayChoice(BaseModel):
    """One choice as the session shows it. text is None when the API sent no content."""

    model_config = ConfigDict(frozen=True)

    index: int
    text: str | None

    def render(self) -> str:
        return NO_CONTENT_MARKER if self.text is None else self.text


# =============================================================================
# completion variant
# =============================================================================


class TextChoice(BaseModel):
    text: str | None


class TextCompletionResponse(BaseModel):
    choices: list[TextChoice]

    def display_choices(self) -> list[DisplayChoice]:
        return [
            DisplayChoice(index=i, text=choice.text)
            for i, choice in enumerate(self.choices)
        ]


# =============================================================================
# chat variant
# =============================================================================


class ChatMessage(BaseModel):
    role: str
    content: str | None = None
    function_call: str | dict[str, Any] | None = None


class ChatChoice(BaseModel):
    index: int
    finish_reason: str | None = None
    message: ChatMessage


class Usage(BaseModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionResponse(BaseModel):
    id: str
    model: str
    created: int
    object: str
    choices: list[ChatChoice]
    usage: Usage | None = None

    def display_choices(self) -> list[DisplayChoice]:
        return [
            DisplayChoice(index=i, text=choice.message.content)
            for i, choice in enumerate(self.choices)
        ]


CompletionResponse = TextCompletionResponse | ChatCompletionResponse

RESPONSE_SCHEMAS: dict[SchemaVariant, type[TextCompletionResponse] | type[ChatCompletionResponse]] = {
    SchemaVariant.COMPLETION: TextCompletionResponse,
    SchemaVariant.CHAT: ChatCompletionResponse,
}


class ApiErrorDetail(BaseModel):
    message: str = ""
    type: str | None = None
    code: str | int | None = None


class ApiErrorBody(BaseModel):
    """Error envelope returned alongside non-success statuses."""

    error: ApiErrorDetail
