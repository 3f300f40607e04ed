"""
Configuration Schemas.

Pydantic models defining the expected structure of each YAML config file.
Used by AppConfig to validate configuration at load time. If a YAML file
has missing keys, wrong types, or unknown fields, a clear ValidationError
is raised at startup instead of a cryptic KeyError deep in application code.

Each top-level class corresponds to one file in config/settings/:
    ApplicationSchema  → application.yaml
    LoggingSchema      → logging.yaml
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _StrictBase(BaseModel):
    """Base with extra='forbid' so unknown YAML keys are caught immediately."""

    model_config = ConfigDict(extra="forbid")


class SchemaVariant(str, Enum):
    """Response body shape the client is built to expect."""

    COMPLETION = "completion"
    CHAT = "chat"


class OnEmptyInput(str, Enum):
    """What a blank input line does to the session."""

    RETRY = "retry"
    TERMINATE = "terminate"


class OnRequestError(str, Enum):
    """What a failed turn does to the session."""

    ABORT_SESSION = "abort_session"
    CONTINUE_SESSION = "continue_session"


# =============================================================================
# application.yaml
# =============================================================================


class ApiSchema(_StrictBase):
    base_url: str
    path: str
    schema_variant: SchemaVariant
    timeout_seconds: float = Field(gt=0)
    organization_header: str


class RequestSchema(_StrictBase):
    model: str
    max_tokens: int = Field(gt=0)
    temperature: float = Field(ge=0)


class SessionSchema(_StrictBase):
    prompt: str
    response_label: str
    log_file: str
    log_file_mode: int
    on_empty_input: OnEmptyInput
    on_request_error: OnRequestError

    @field_validator("log_file_mode", mode="before")
    @classmethod
    def _parse_octal(cls, value: object) -> object:
        """Accept file modes written as octal strings ("0600")."""
        if isinstance(value, str):
            return int(value, 8)
        return value


class ApplicationSchema(_StrictBase):
    name: str
    version: str
    description: str
    api: ApiSchema
    request: RequestSchema
    session: SessionSchema


# =============================================================================
# logging.yaml
# =============================================================================


class ConsoleHandlerSchema(_StrictBase):
    enabled: bool


class FileHandlerSchema(_StrictBase):
    enabled: bool
    path: str
    max_bytes: int
    backup_count: int


class HandlersSchema(_StrictBase):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_StrictBase):
    level: str
    format: str
    handlers: HandlersSchema
