"""
Courier CLI - send a single HTTP request from the command line.

Body options may be combined; the last body family applied wins, in the order
--field/--file, --encoded, --raw, --json, --binary.
"""

import sys

import click

from courier.api.config import ConfigManager
from courier.api.errors import CourierError
from courier.api.request import Request
from courier.util.log import configure_logging, get_logger


def _split_pair(value: str, sep: str, option: str) -> tuple[str, str]:
    key, found, rest = value.partition(sep)
    if not found or not key.strip():
        msg = f"expected KEY{sep}VALUE, got '{value}'"
        raise click.BadParameter(msg, param_hint=option)
    return key.strip(), rest.strip() if sep == ":" else rest


def build_request(
    url: str,
    *,
    method: str = "GET",
    headers: tuple[str, ...] = (),
    query: tuple[str, ...] = (),
    fields: tuple[str, ...] = (),
    files: tuple[str, ...] = (),
    encoded: tuple[str, ...] = (),
    raw: str | None = None,
    json_text: str | None = None,
    binary: str | None = None,
    timeout: float | None = None,
) -> Request:
    """Translate CLI options into a configured Request."""
    config = ConfigManager.get()
    if timeout is not None:
        config = config.model_copy(update={"timeout": timeout})

    request = Request(url, config=config)
    request.set_method(method)

    for item in headers:
        request.set_header(*_split_pair(item, ":", "--header"))
    for item in query:
        request.add_query_param(*_split_pair(item, "=", "--query"))
    for item in fields:
        request.body.add_form_field(*_split_pair(item, "=", "--field"))
    for item in files:
        key, path = _split_pair(item, "=", "--file")
        request.body.add_form_binary_file(key, path)
    for item in encoded:
        request.body.add_encoded_field(*_split_pair(item, "=", "--encoded"))
    if raw is not None:
        request.body.add_raw_data(raw)
    if json_text is not None:
        request.body.add_json_data(json_text)
    if binary is not None:
        request.body.add_binary_file(binary)
    return request


@click.group()
@click.version_option(version="0.1.0", prog_name="courier")
def cli():
    """Courier HTTP client CLI tool."""
    pass


@cli.command("send")
@click.argument("url")
@click.option("--method", "-X", default="GET", show_default=True, help="HTTP method")
@click.option(
    "--header", "-H", multiple=True, help="Request header 'Name: value' (repeatable)"
)
@click.option("--query", "-q", multiple=True, help="Query parameter k=v (repeatable)")
@click.option("--field", multiple=True, help="multipart form field k=v (repeatable)")
@click.option(
    "--file", "files", multiple=True, help="multipart binary file k=PATH (repeatable)"
)
@click.option("--encoded", multiple=True, help="urlencoded form field k=v (repeatable)")
@click.option("--raw", "raw", default=None, help="text/plain body")
@click.option("--json", "json_text", default=None, help="JSON object or array body")
@click.option(
    "--binary",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="application/octet-stream body read from a file",
)
@click.option("--include", "-i", is_flag=True, help="Print status line and headers")
@click.option("--timeout", type=float, default=None, help="Timeout in seconds")
@click.option("--log-level", default="WARNING", show_default=True, help="Log level")
def cmd_send(
    url: str,
    method: str,
    header: tuple[str, ...],
    query: tuple[str, ...],
    field: tuple[str, ...],
    files: tuple[str, ...],
    encoded: tuple[str, ...],
    raw: str | None,
    json_text: str | None,
    binary: str | None,
    include: bool,
    timeout: float | None,
    log_level: str,
):
    """Send a request to URL and print the response body."""
    configure_logging(level=log_level.upper())
    log = get_logger("cli")

    try:
        request = build_request(
            url,
            method=method,
            headers=header,
            query=query,
            fields=field,
            files=files,
            encoded=encoded,
            raw=raw,
            json_text=json_text,
            binary=binary,
            timeout=timeout,
        )
        response = request.send()
    except (CourierError, OSError) as e:
        log.debug("send failed: {error!r}", error=e)
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(str(response) if include else response.text)


def main():
    """CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
