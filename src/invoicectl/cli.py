"""Entry point: the ``invoicectl`` group, its global options and subcommands."""

from __future__ import annotations

import click

from invoicectl import __version__
from invoicectl.commands import register_commands
from invoicectl.commands._base import InvoiceGroup
from invoicectl.commands._context import AppContext
from invoicectl.config.settings import InvoiceSettings

_ROOT_EXAMPLES = """\
invoicectl init --owner OWNER --start-height 100
invoicectl --as SUPPLIER create INV-001 --supplier SUPPLIER --buyer BUYER --amount 1000 --due-date 200
invoicectl --as BUYER certify INV-001
invoicectl --json get INV-001"""


@click.group(cls=InvoiceGroup, invoke_without_command=True, examples=_ROOT_EXAMPLES)
@click.version_option(version=__version__, prog_name="invoicectl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essential value.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and timing spans.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Use this invoicectl.toml.")
@click.option(
    "--as",
    "caller",
    default=None,
    metavar="IDENTITY",
    help="Identity performing the operation (env: INVOICECTL_CALLER).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    caller: str | None,
) -> None:
    """invoicectl: supplier/buyer invoice certification registry."""
    app = AppContext(
        InvoiceSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
            caller=caller,
        )
    )
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
