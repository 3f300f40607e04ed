"""
Interactive Session Loop.

Reads one prompt at a time, sends it through the CompletionClient, prints
the choices to stdout and mirrors prompts, choices and failures into the
audit log. Single-threaded: every turn finishes before the next prompt.

States:
    AWAITING_INPUT → REQUESTING → RENDERING → AWAITING_INPUT
    AWAITING_INPUT → TERMINATED          (blank line with on_empty_input=terminate, or EOF)
    RENDERING      → TERMINATED          (failed turn with on_request_error=abort_session)
"""

import sys
from enum import Enum
from typing import TextIO

import click

from modules.completion.client import CompletionClient
from modules.completion.schemas import DisplayChoice
from modules.core.audit import AuditLog
from modules.core.config_schema import OnEmptyInput, OnRequestError, SessionSchema
from modules.core.exceptions import CompletionError, ValidationError
from modules.core.logging import get_logger, log_with_source
from modules.core.process import EXIT_FAILURE, EXIT_SUCCESS, Terminator

logger = get_logger(__name__)


class SessionState(str, Enum):
    AWAITING_INPUT = "awaiting_input"
    REQUESTING = "requesting"
    RENDERING = "rendering"
    TERMINATED = "terminated"


class ChatSession:
    """
    Prompt/response loop over a CompletionClient.

    The session does not own the client or the audit log; whoever created
    them closes them once run() returns or the terminator fires.

    Usage:
        session = ChatSession(client, audit, settings, ProcessTerminator())
        exit_code = session.run()
    """

    def __init__(
        self,
        client: CompletionClient,
        audit: AuditLog,
        settings: SessionSchema,
        terminator: Terminator,
        input_stream: TextIO | None = None,
    ) -> None:
        self.client = client
        self.audit = audit
        self.settings = settings
        self.terminator = terminator
        self._input = input_stream if input_stream is not None else sys.stdin
        self.state = SessionState.AWAITING_INPUT
        self.turns = 0

    def read_prompt(self) -> str | None:
        """
        Prompt on stderr and read until a usable line arrives.

        Returns the trimmed prompt, or None when the session should end
        (EOF, interrupt, or a blank line under the terminate policy).
        """
        while True:
            click.echo(f"{self.settings.prompt} ", err=True, nl=False)
            try:
                line = self._input.readline()
            except KeyboardInterrupt:
                click.echo(err=True)
                return None
            except UnicodeDecodeError as e:
                click.echo(click.style(f"Error: input is not valid text: {e.reason}", fg="red"), err=True)
                log_with_source(logger, "session", "warning", "Unreadable input line", error=str(e))
                continue

            if not line:
                return None

            text = line.strip()
            if text:
                return text
            if self.settings.on_empty_input is OnEmptyInput.TERMINATE:
                return None

    def run(self) -> int:
        """Loop until terminated. Returns the process exit status."""
        self.state = SessionState.AWAITING_INPUT
        log_with_source(logger, "session", "info", "Session started")

        while self.state is not SessionState.TERMINATED:
            prompt = self.read_prompt()
            if prompt is None:
                self.state = SessionState.TERMINATED
                break
            self.run_turn(prompt)

        log_with_source(logger, "session", "info", "Session ended", turns=self.turns)
        return EXIT_SUCCESS

    def run_turn(self, prompt: str) -> None:
        """Send one prompt and render its outcome."""
        self.turns += 1
        self.state = SessionState.REQUESTING
        self.audit.info("Ask: %s", prompt)

        try:
            choices = self.client.complete(prompt)
        except (CompletionError, ValidationError) as e:
            self.state = SessionState.RENDERING
            self._render_error(e)
            if self.settings.on_request_error is OnRequestError.ABORT_SESSION:
                self.state = SessionState.TERMINATED
                self.terminator(EXIT_FAILURE)
            else:
                self.state = SessionState.AWAITING_INPUT
            return

        self.state = SessionState.RENDERING
        self._render_choices(choices)
        self.state = SessionState.AWAITING_INPUT

    def _render_choices(self, choices: list[DisplayChoice]) -> None:
        click.echo(self.settings.response_label)
        for choice in choices:
            line = f"[{choice.index}]: {choice.render()}"
            click.echo(line)
            self.audit.info("%s", line)

    def _render_error(self, error: CompletionError | ValidationError) -> None:
        click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
        self.audit.error("error: %s", error.message)
        log_with_source(
            logger,
            "session",
            "warning",
            "Turn failed",
            error_code=error.code,
            error=error.message,
            policy=self.settings.on_request_error.value,
        )
