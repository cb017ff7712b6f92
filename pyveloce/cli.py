"""CLI interface for PyVeloce."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import click

from .api import VeloceClient
from .config import config
from .exceptions import VeloceAPIError, VeloceBuildError, VeloceConfigError
from .output import OutputFormatter
from .sync import MemberFilter, SyncEngine, SyncReport
from .ui import UiDefinitionsBuilder
from .utils import DEFAULT_MAX_WORKERS

logger = logging.getLogger(__name__)


def _parse_members(value: Optional[str]) -> MemberFilter:
    try:
        return MemberFilter.parse(value)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--members'") from e


def _create_client(ctx: Any) -> VeloceClient:
    """Create an API client from global options and config, or exit."""
    out: OutputFormatter = ctx.obj["out"]
    try:
        return VeloceClient(
            instance_url=ctx.obj.get("instance_url"),
            access_token=ctx.obj.get("access_token"),
        )
    except VeloceConfigError as e:
        out.error(str(e))
        out.info("Run 'veloce init' to configure your org credentials")
        raise click.exceptions.Exit(1) from e


def _finish(ctx: Any, report: SyncReport) -> None:
    out: OutputFormatter = ctx.obj["out"]
    if out.json_output:
        out.output_json(report.to_dict())
    if not report.ok:
        ctx.exit(1)


@click.group()
@click.option(
    "--instance-url", "-u", envvar="VELOCE_INSTANCE_URL", help="Org instance URL"
)
@click.option(
    "--access-token", "-t", envvar="VELOCE_ACCESS_TOKEN", help="OAuth access token"
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pyveloce")
@click.pass_context
def main(
    ctx: Any,
    instance_url: Optional[str],
    access_token: Optional[str],
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyVeloce - Pull & push product model UI definitions."""
    ctx.ensure_object(dict)
    ctx.obj["instance_url"] = instance_url
    ctx.obj["access_token"] = access_token
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyveloce").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.option("--instance-url", "-u", prompt="Org instance URL", help="Org instance URL")
@click.option(
    "--access-token",
    "-t",
    prompt="Access token",
    hide_input=True,
    help="OAuth access token",
)
@click.pass_context
def init(ctx: Any, instance_url: str, access_token: str) -> None:
    """Store org credentials in ~/.config/pyveloce/config."""
    out: OutputFormatter = ctx.obj["out"]

    out.info("Validating credentials...")
    try:
        client = VeloceClient(instance_url=instance_url, access_token=access_token)
        client.query("SELECT Id FROM Organization LIMIT 1")
        out.success("Credentials are valid")
    except VeloceAPIError as e:
        out.error(f"Credential validation failed: {e}")
        if not click.confirm("Save credentials anyway?", default=False):
            out.warning("Configuration cancelled.")
            ctx.exit(1)

    config.save_credentials(instance_url, access_token)
    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "Configuration saved successfully"),
            ("Config file", str(config.get_config_path())),
        ],
    )


@main.command()
@click.option(
    "--members",
    "-m",
    help="Comma-separated members, e.g. 'ui:MyModel:Main,pml:MyModel'",
)
@click.option(
    "--sourcepath",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    help="Local source directory (default: ./source)",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=DEFAULT_MAX_WORKERS,
    show_default=True,
    help="Number of records processed in parallel",
)
@click.pass_context
def pull(
    ctx: Any, members: Optional[str], sourcepath: Optional[Path], workers: int
) -> None:
    """Download UI definitions and PML into the source directory."""
    out: OutputFormatter = ctx.obj["out"]
    member_filter = _parse_members(members)
    client = _create_client(ctx)

    try:
        engine = SyncEngine(client, out, source_path=sourcepath, max_workers=workers)
        report = engine.pull(member_filter)
    except KeyboardInterrupt:
        out.warning("\nPull cancelled by user")
        ctx.exit(130)
    except VeloceAPIError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)
    finally:
        client.close()

    _finish(ctx, report)


@main.command()
@click.option(
    "--members",
    "-m",
    help="Comma-separated model names to push, e.g. 'ui:MyModel'",
)
@click.option(
    "--sourcepath",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    help="Local source directory (default: ./source)",
)
@click.option(
    "--workers",
    "-j",
    type=int,
    default=DEFAULT_MAX_WORKERS,
    show_default=True,
    help="Number of records processed in parallel",
)
@click.pass_context
def push(
    ctx: Any, members: Optional[str], sourcepath: Optional[Path], workers: int
) -> None:
    """Pack and upload UI definitions from the source directory."""
    out: OutputFormatter = ctx.obj["out"]
    member_filter = _parse_members(members)
    client = _create_client(ctx)

    try:
        engine = SyncEngine(client, out, source_path=sourcepath, max_workers=workers)
        report = engine.push(member_filter)
    except KeyboardInterrupt:
        out.warning("\nPush cancelled by user")
        ctx.exit(130)
    except VeloceAPIError as e:
        out.error(f"API error: {e}")
        ctx.exit(1)
    finally:
        client.close()

    _finish(ctx, report)


@main.command()
@click.option("--name", "-n", required=True, help="Product model name")
@click.option(
    "--sourcepath",
    "-i",
    type=click.Path(file_okay=False, path_type=Path),
    help="Local source directory (default: ./source)",
)
@click.option(
    "--output",
    "-o",
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output file (default: stdout)",
)
@click.pass_context
def pack(
    ctx: Any, name: str, sourcepath: Optional[Path], output_file: Optional[Path]
) -> None:
    """Pack the UI definitions of one model into a JSON file.

    Nothing is sent to the org.
    """
    out: OutputFormatter = ctx.obj["out"]
    source_path = sourcepath or config.source_path

    try:
        definitions = UiDefinitionsBuilder(source_path, name).pack()
    except VeloceBuildError as e:
        out.error(str(e))
        ctx.exit(1)

    content = json.dumps(definitions, indent=2)
    if output_file is None:
        click.echo(content)
        return

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content, encoding="utf-8")
    out.success(f"Packed {len(definitions)} definition(s) into {output_file}")


if __name__ == "__main__":
    main()
