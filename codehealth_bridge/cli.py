"""CLI entry point — command definitions using Click.

Commands:
    init       Generate a template config file
    serve      Run the webhook receiver
    comment    Print the review a stored webhook payload would produce
    sign       Print the webhook signature of a payload file
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click

from codehealth_bridge import __version__


# ---------------------------------------------------------------------------
# Helpers shared by all data commands
# ---------------------------------------------------------------------------

def _load_config(ctx: click.Context):
    """Load config. Exits on error."""
    from codehealth_bridge.config import ConfigError, load

    try:
        return load(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Configuration error: {exc}", err=True)
        sys.exit(1)


def _emit_json(data: Any, pretty: bool) -> None:
    indent = 2 if pretty else None
    click.echo(json.dumps(data, indent=indent, ensure_ascii=False))


def _handle_errors(func):
    """Decorator that catches client and payload exceptions and exits cleanly."""
    import functools

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        from codehealth_bridge.client import (
            AuthenticationError,
            ClientError,
            NetworkError,
            NotFoundError,
        )
        from codehealth_bridge.models import MalformedPayload

        try:
            return func(*args, **kwargs)
        except MalformedPayload as exc:
            click.echo(f"Payload error: {exc}", err=True)
            sys.exit(1)
        except AuthenticationError as exc:
            click.echo(f"Authentication error: {exc}", err=True)
            sys.exit(1)
        except NotFoundError as exc:
            click.echo(f"Not found: {exc}", err=True)
            sys.exit(1)
        except NetworkError as exc:
            click.echo(f"Network error: {exc}", err=True)
            sys.exit(1)
        except ClientError as exc:
            click.echo(f"HTTP error: {exc}", err=True)
            sys.exit(1)

    return wrapper


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--config", "config_path", default="codehealth-config.yaml", show_default=True,
              help="Path to the configuration file.")
@click.option("--verbose", is_flag=True, default=False,
              help="Enable debug logging.")
@click.version_option(__version__, prog_name="codehealth-bridge")
@click.pass_context
def cli(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """Relay SonarQube quality-gate results to Gerrit reviews."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------

@cli.command("init")
@click.option("--output", "output_path", default="codehealth-config.yaml", show_default=True,
              help="Path where the template config file will be written.")
def init_command(output_path: str) -> None:
    """Generate a template codehealth-config.yaml file."""
    from codehealth_bridge.config import ConfigError, generate_template
    try:
        generate_template(output_path)
        click.echo(f"Template written to '{output_path}'.")
        click.echo("Edit it with the webhook secret, Gerrit credentials and whitelist.")
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------

@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8080, show_default=True, type=int, help="Port to listen on.")
@click.pass_context
def serve_command(ctx: click.Context, host: str, port: int) -> None:
    """Run the webhook receiver (Flask development server)."""
    from codehealth_bridge.app import create_app

    config = _load_config(ctx)
    create_app(config).run(host=host, port=port, debug=False)


# ---------------------------------------------------------------------------
# comment
# ---------------------------------------------------------------------------

@cli.command("comment")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--inline/--no-inline", default=None,
              help="Force inline comments on or off (default: follow the whitelist).")
@click.option("--pretty", is_flag=True, default=False,
              help="Pretty-print the JSON output.")
@click.pass_context
@_handle_errors
def comment_command(ctx: click.Context, payload_file: Path, inline: bool | None,
                    pretty: bool) -> None:
    """Print the Gerrit review PAYLOAD_FILE would produce, without posting it."""
    from codehealth_bridge.handler import WebhookHandler
    from codehealth_bridge.models import AnalysisEvent

    config = _load_config(ctx)
    event = AnalysisEvent.parse(payload_file.read_bytes())
    change, revision = event.change_ref()

    if ctx.obj["verbose"]:
        click.echo(f"[verbose] {event.gerrit_project or '?'} change {change} revision {revision}",
                   err=True)

    submission = WebhookHandler(config).build_submission(event, inline=inline)
    _emit_json(submission.to_dict(), pretty)


# ---------------------------------------------------------------------------
# sign
# ---------------------------------------------------------------------------

@cli.command("sign")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def sign_command(ctx: click.Context, payload_file: Path) -> None:
    """Print the X-Sonar-Webhook-HMAC-SHA256 value for PAYLOAD_FILE."""
    from codehealth_bridge.signature import sign

    config = _load_config(ctx)
    click.echo(sign(payload_file.read_bytes(), config.hmac_secret))
