"""Unit tests for the interactive session loop."""

import io
from unittest.mock import patch

import pytest

from modules.cli.session import ChatSession, SessionState
from modules.completion.schemas import DisplayChoice
from modules.core.config_schema import OnEmptyInput, OnRequestError
from modules.core.exceptions import APIError, DecodingError, TransportError, ValidationError
from modules.core.process import PanicTerminator, ProcessTerminated


@pytest.fixture
def make_session(mock_client, audit_log, session_settings):
    """Build a session reading from the given text."""

    def factory(text: str, **overrides) -> ChatSession:
        settings = session_settings.model_copy(update=overrides)
        return ChatSession(
            mock_client,
            audit_log,
            settings,
            PanicTerminator(),
            input_stream=io.StringIO(text),
        )

    return factory


class TestReadPrompt:
    def test_returns_trimmed_line(self, make_session):
        session = make_session("  Hello world \n")
        assert session.read_prompt() == "Hello world"

    def test_eof_ends_session(self, make_session):
        assert make_session("").read_prompt() is None

    def test_blank_line_terminates_by_default(self, make_session):
        assert make_session("   \nHello\n").read_prompt() is None

    def test_blank_line_retries_under_retry_policy(self, make_session, capsys):
        session = make_session("\n  \nHello\n", on_empty_input=OnEmptyInput.RETRY)

        assert session.read_prompt() == "Hello"
        assert capsys.readouterr().err.count("Ask: ") == 3

    def test_retry_policy_still_ends_on_eof(self, make_session):
        session = make_session("\n\n", on_empty_input=OnEmptyInput.RETRY)
        assert session.read_prompt() is None

    def test_prompt_cue_written_to_stderr(self, make_session, capsys):
        make_session("Hello\n").read_prompt()

        captured = capsys.readouterr()
        assert captured.err == "Ask: "
        assert captured.out == ""

    def test_undecodable_line_is_reported_and_reprompted(self, mock_client, audit_log, session_settings, capsys):
        class UndecodableOnce(io.StringIO):
            def __init__(self, text):
                super().__init__(text)
                self.raised = False

            def readline(self, *args):
                if not self.raised:
                    self.raised = True
                    raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
                return super().readline(*args)

        session = ChatSession(
            mock_client,
            audit_log,
            session_settings,
            PanicTerminator(),
            input_stream=UndecodableOnce("Hello\n"),
        )

        assert session.read_prompt() == "Hello"
        err = capsys.readouterr().err
        assert "Error: input is not valid text" in err
        assert err.count("Ask: ") == 2


class TestRun:
    def test_renders_choices_with_ordinal_index(self, make_session, mock_client, capsys):
        mock_client.complete.return_value = [DisplayChoice(index=0, text="Hi there")]
        session = make_session("Hello\n\n")

        assert session.run() == 0

        mock_client.complete.assert_called_once_with("Hello")
        assert capsys.readouterr().out == "ChatGPT:\n[0]: Hi there\n"

    def test_multiple_choices_in_order(self, make_session, mock_client, capsys):
        mock_client.complete.return_value = [
            DisplayChoice(index=0, text="one"),
            DisplayChoice(index=1, text=None),
        ]

        make_session("Hello\n").run()

        assert capsys.readouterr().out == "ChatGPT:\n[0]: one\n[1]: <no content>\n"

    def test_blank_first_input_sends_nothing(self, make_session, mock_client, audit_path, capsys):
        session = make_session("\n")

        assert session.run() == 0

        mock_client.complete.assert_not_called()
        assert capsys.readouterr().out == ""
        assert audit_path.read_text() == ""
        assert session.state is SessionState.TERMINATED

    def test_loops_until_blank_line(self, make_session, mock_client):
        mock_client.complete.return_value = [DisplayChoice(index=0, text="ok")]
        session = make_session("one\ntwo\nthree\n\nfour\n")

        session.run()

        assert [c.args[0] for c in mock_client.complete.call_args_list] == ["one", "two", "three"]
        assert session.turns == 3

    def test_audit_log_records_prompt_and_choices(self, make_session, mock_client, audit_log, audit_path):
        mock_client.complete.return_value = [DisplayChoice(index=0, text="Hi there")]

        make_session("Hello\n").run()
        audit_log.close()

        lines = audit_path.read_text().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("INFO: ")
        assert lines[0].endswith("Ask: Hello")
        assert lines[1].endswith("[0]: Hi there")
        assert "session.py:" in lines[0]

    def test_prompt_logged_before_request(self, make_session, mock_client, audit_log, audit_path):
        def complete(prompt):
            audit_log._handler.flush()
            assert "Ask: Hello" in audit_path.read_text()
            return []

        mock_client.complete.side_effect = complete

        make_session("Hello\n").run()


class TestFailedTurns:
    @pytest.mark.parametrize(
        "error",
        [
            APIError(401, "Unauthorized"),
            TransportError("timed out"),
            DecodingError("bad body"),
            ValidationError("Prompt must not be empty"),
        ],
    )
    def test_continue_policy_keeps_session_alive(self, make_session, mock_client, error, capsys):
        mock_client.complete.side_effect = [error, [DisplayChoice(index=0, text="second")]]
        session = make_session("first\nsecond\n\n")

        assert session.run() == 0

        captured = capsys.readouterr()
        assert captured.out == "ChatGPT:\n[0]: second\n"
        assert f"Error: {error.message}" in captured.err
        assert mock_client.complete.call_count == 2

    def test_api_error_written_to_audit_log(self, make_session, mock_client, audit_log, audit_path):
        mock_client.complete.side_effect = APIError(401, "Unauthorized")

        make_session("Hello\n").run()
        audit_log.close()

        lines = audit_path.read_text().splitlines()
        assert lines[0].endswith("Ask: Hello")
        assert lines[1].startswith("ERROR: ")
        assert lines[1].endswith("error: 401 Unauthorized")

    def test_abort_policy_terminates_with_failure(self, make_session, mock_client, capsys):
        mock_client.complete.side_effect = TransportError("connection refused")
        session = make_session("Hello\nagain\n", on_request_error=OnRequestError.ABORT_SESSION)

        with pytest.raises(ProcessTerminated) as exc_info:
            session.run()

        assert exc_info.value.code == 1
        assert session.state is SessionState.TERMINATED
        assert mock_client.complete.call_count == 1
        assert capsys.readouterr().out == ""

    def test_unexpected_errors_propagate(self, make_session, mock_client):
        mock_client.complete.side_effect = RuntimeError("bug")

        with pytest.raises(RuntimeError, match="bug"):
            make_session("Hello\n").run()

    def test_failed_turn_logged_as_warning(self, make_session, mock_client):
        mock_client.complete.side_effect = DecodingError("bad body")

        with patch("modules.cli.session.logger") as mock_logger:
            make_session("Hello\n").run()

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["error_code"] == "CMP_DECODING_ERROR"
