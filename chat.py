#!/usr/bin/env python3
"""
Completion Chat Client.

Interactive CLI that sends each prompt typed on stdin to a text-completion
API, prints the returned choices and keeps an audit log of the exchange.
An empty line ends the session.

Usage:
    python chat.py --help
    python chat.py -auth sk-...
    python chat.py -auth sk-... -org org-... -log session.log
    python chat.py -auth sk-... --schema chat -verbose
    python chat.py -auth sk-... -debug 2> trace.log
"""

import sys
from pathlib import Path
from typing import Any, NoReturn

import click

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.cli.session import ChatSession
from modules.completion.client import CompletionClient, client_options
from modules.completion.schemas import AuthCredentials
from modules.core.audit import open_audit_log
from modules.core.config import get_app_config, get_settings, validate_project_root
from modules.core.config_schema import SchemaVariant
from modules.core.exceptions import ConfigurationError
from modules.core.logging import get_logger, log_with_source, setup_logging
from modules.core.process import EXIT_FAILURE, ProcessTerminator, Terminator


def _fail(ctx: click.Context, terminator: Terminator, message: str, show_usage: bool = False) -> NoReturn:
    """Report a startup failure on stderr and terminate with EXIT_FAILURE."""
    if show_usage:
        click.echo(ctx.get_usage(), err=True)
        click.echo(f"Try '{ctx.command_path} --help' for help.\n", err=True)
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    terminator(EXIT_FAILURE)


@click.command(context_settings={"help_option_names": ["-h", "-help", "--help"]})
@click.option("-auth", "--auth", "auth", default=None, help="API bearer token. Falls back to OPENAI_API_KEY.")
@click.option("-org", "--org", "org", default=None, help="Organization header value. Falls back to OPENAI_ORGANIZATION.")
@click.option("-log", "--log", "log_file", default=None, help="Audit log file name (default: ChatGPT.log).")
@click.option("-debug", "--debug", "debug", is_flag=True, help="Trace requests and responses on stderr.")
@click.option("-verbose", "--verbose", "verbose", is_flag=True, help="Show version and INFO level logging.")
@click.option(
    "--schema",
    type=click.Choice([variant.value for variant in SchemaVariant]),
    default=None,
    help="Response schema variant (overrides application.yaml).",
)
@click.pass_context
def main(
    ctx: click.Context,
    auth: str | None,
    org: str | None,
    log_file: str | None,
    debug: bool,
    verbose: bool,
    schema: str | None,
) -> int:
    """
    Ask a completion API questions from the terminal.

    Each line typed is sent as one prompt; the answer's choices are printed
    as "[n]: text". Enter an empty line to quit.

    Examples:

        python chat.py -auth sk-...

        python chat.py -auth sk-... -org org-acme --schema chat

        OPENAI_API_KEY=sk-... python chat.py -log today.log
    """
    obj: dict[str, Any] = ctx.obj or {}
    terminator: Terminator = obj.get("terminator") or ProcessTerminator()

    validate_project_root()

    try:
        app = get_app_config().application
    except (ConfigurationError, FileNotFoundError) as e:
        _fail(ctx, terminator, f"could not load config: {e}")

    if debug:
        setup_logging(level="DEBUG")
    elif verbose:
        setup_logging(level="INFO")
    else:
        setup_logging()
    logger = get_logger("chat")

    secrets = get_settings()
    token = (auth or secrets.openai_api_key).strip()
    organization = org if org is not None else secrets.openai_organization
    if not token:
        _fail(ctx, terminator, "an auth token is required (-auth or OPENAI_API_KEY).", show_usage=True)

    credentials = AuthCredentials(token=token, organization=organization)

    if verbose:
        click.echo(f"{app.name} {app.version}", err=True)

    api = app.api
    if schema is not None:
        api = api.model_copy(update={"schema_variant": SchemaVariant(schema)})

    log_path = Path(log_file or app.session.log_file)
    try:
        audit = open_audit_log(log_path, file_mode=app.session.log_file_mode)
    except OSError as e:
        _fail(ctx, terminator, f"cannot open log file {log_path}: {e}")

    with audit, CompletionClient(credentials, api, app.request, transport=obj.get("transport")) as client:
        log_with_source(logger, "cli", "info", "Client ready", log_file=str(log_path), **client_options(client))
        if hasattr(sys.stdin, "reconfigure"):
            sys.stdin.reconfigure(errors="replace")
        session = ChatSession(client, audit, app.session, terminator)
        return session.run()


def run(args: list[str] | None = None, terminator: Terminator | None = None) -> None:
    """Console entry point. Usage errors exit with status 1."""
    terminator = terminator or ProcessTerminator()
    try:
        exit_code = main.main(args=args, standalone_mode=False, obj={"terminator": terminator})
    except click.UsageError as e:
        e.show()
        terminator(EXIT_FAILURE)
    except click.Abort:
        click.echo(err=True)
        terminator(EXIT_FAILURE)
    terminator(exit_code or 0)


if __name__ == "__main__":
    run()
