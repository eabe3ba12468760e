"""CLI entrypoint: Typer app definition and command registration"""

from typing import Annotated

import typer

from guidecheck.cli.commands import (
    blocks_cmd, bootstrap_cmd, check_cmd, contrib_cmd, history_cmd, init_cmd, list_cmd,
)
from guidecheck.config import load_config
from guidecheck.logs import configure_logging


app = typer.Typer(name="guidecheck", no_args_is_help=True, help="Doctest the code snippets in versioned markdown guides")


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
    ):
    """Configure logging from --verbose or the log_level setting."""
    if verbose:
        level = "DEBUG"
    else:
        try:
            level = load_config().log_level
        except ValueError:
            # Reported by the command itself.
            level = "WARNING"
    try:
        configure_logging(level)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


app.command(name="check")(check_cmd)
app.command(name="bootstrap")(bootstrap_cmd)
app.command(name="list")(list_cmd)
app.command(name="blocks")(blocks_cmd)
app.command(name="history")(history_cmd)
app.command(name="contrib")(contrib_cmd)
app.command(name="init")(init_cmd)
