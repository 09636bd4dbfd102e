"""Typer application and CLI entry point for tfetch.

The ``tfetch`` command exposes the four client verbs for quick use from a
shell::

    tfetch get https://api.example.com/posts/1
    tfetch --retries 3 post https://api.example.com/posts --type json --data '{"title": "x"}'
    tfetch put https://api.example.com/files/1 --type blob --data @photo.png
    tfetch delete https://api.example.com/posts/1 -H "X-Token: abc"
    tfetch config

Payloads go to stdout; diagnostics go to stderr.  Failures exit with the
``exit_code`` of the :class:`~tfetch.exceptions.TFetchError` involved.
"""

from __future__ import annotations

import json
import signal
import sys
from pathlib import Path
from typing import Any, Callable, NoReturn, Optional
from urllib.parse import parse_qsl

import typer

from tfetch import __version__
from tfetch.exceptions import ConfigurationError, TFetchError
from tfetch.models import ContentType, ContentWrapper, Outcome

app = typer.Typer(
    name="tfetch",
    help="HTTP requests with retry, caching and typed bodies.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_HEADER_OPTION = typer.Option(
    None, "--header", "-H", help="Request header as 'Name: value'. Repeatable."
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"tfetch {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON config file."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL for relative request paths."
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", "-r", help="Retry attempts after the first."
    ),
    retry_delay: Optional[int] = typer.Option(
        None, "--retry-delay", help="Delay between attempts in milliseconds."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Transport timeout in seconds."
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Emit [DEBUG] trace lines."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show retry diagnostics."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write the payload to a file."
    ),
) -> None:
    """Install the output manager and collect client overrides."""
    from tfetch.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["overrides"] = {
        "debug": True if debug else None,
        "base_url": base_url,
        "timeout": timeout,
        "retry": {"count": retries, "delay_ms": retry_delay},
    }


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("get")
def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    header: Optional[list[str]] = _HEADER_OPTION,
) -> None:
    """Send a GET request and print the decoded JSON response."""
    _run(ctx, lambda client: client.fetch(url, _parse_headers(header)))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    header: Optional[list[str]] = _HEADER_OPTION,
) -> None:
    """Send a DELETE request and print the decoded JSON response."""
    _run(ctx, lambda client: client.remove(url, _parse_headers(header)))


@app.command("post")
def post_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    content_type: ContentType = typer.Option(
        ContentType.JSON, "--type", "-t", help="Body encoding."
    ),
    data: str = typer.Option(
        ..., "--data", "-d", help="Request body, or @path to read it from a file."
    ),
    header: Optional[list[str]] = _HEADER_OPTION,
) -> None:
    """Send a POST request with an encoded body."""
    _run(
        ctx,
        lambda client: client.submit(
            url, _build_content(content_type, data), _parse_headers(header)
        ),
    )


@app.command("put")
def put_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    content_type: ContentType = typer.Option(
        ContentType.JSON, "--type", "-t", help="Body encoding."
    ),
    data: str = typer.Option(
        ..., "--data", "-d", help="Request body, or @path to read it from a file."
    ),
    header: Optional[list[str]] = _HEADER_OPTION,
) -> None:
    """Send a PUT request with an encoded body."""
    _run(
        ctx,
        lambda client: client.replace(
            url, _build_content(content_type, data), _parse_headers(header)
        ),
    )


@app.command("config")
def config_command(ctx: typer.Context) -> None:
    """Show the effective client configuration."""
    from tfetch.config import default_config_path, resolve_config
    from tfetch.output import format_response, info

    try:
        config = resolve_config(ctx.obj["overrides"], ctx.obj["config_path"])
    except ConfigurationError as exc:
        _fail(exc)
    info(f"Config file: {ctx.obj['config_path'] or default_config_path()}")
    format_response(config.model_dump(mode="json"))


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _run(ctx: typer.Context, call: Callable[[Any], Outcome[Any]]) -> None:
    """Build a client from the resolved config, run *call*, print the outcome."""
    from tfetch.client import SyncClient
    from tfetch.config import resolve_config
    from tfetch.output import format_response

    try:
        config = resolve_config(ctx.obj["overrides"], ctx.obj["config_path"])
        with SyncClient(config) as client:
            outcome = call(client)
    except ConfigurationError as exc:
        _fail(exc)

    if outcome.error is not None:
        _fail(outcome.error)
    format_response(outcome.data)


def _fail(exc: TFetchError) -> NoReturn:
    from tfetch.output import error

    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _parse_headers(values: Optional[list[str]]) -> Optional[dict[str, str]]:
    """Turn ``["Name: value", ...]`` into a header mapping."""
    if not values:
        return None
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ConfigurationError(f"Invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _read_data(data: str) -> bytes:
    if data.startswith("@"):
        path = Path(data[1:])
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read {path}: {exc}") from exc
    return data.encode("utf-8")


def _build_content(content_type: ContentType, data: str) -> ContentWrapper:
    """Interpret CLI ``--data`` according to ``--type``."""
    raw = _read_data(data)
    if content_type == ContentType.BLOB:
        return ContentWrapper(type=content_type, data=raw)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigurationError(f"--data is not UTF-8 text: {exc}") from exc
    if content_type == ContentType.JSON:
        try:
            return ContentWrapper(type=content_type, data=json.loads(text))
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"--data is not valid JSON: {exc}") from exc
    if content_type == ContentType.FORM:
        return ContentWrapper(type=content_type, data=parse_qsl(text, keep_blank_values=True))
    return ContentWrapper(type=content_type, data=text)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Console-script entry point for ``tfetch``."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except TFetchError as exc:
        from tfetch.output import error

        error(str(exc))
        sys.exit(exc.exit_code)
