import logging
import sys

import typer

from kindctl.commands import create, delete, export, get
from kindctl.config import Config
from kindctl.logging import setup_logger

app = typer.Typer(help="Create and manage local multi-node Kubernetes clusters.")

debug_mode = False


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug mode."""
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, Config.LOG_LEVEL, logging.INFO)
    setup_logger("kindctl", level)


# Add all command groups
app.add_typer(create.app, name="create", help="Create a cluster")
app.add_typer(delete.app, name="delete", help="Delete a cluster")
app.add_typer(get.app, name="get", help="List clusters and nodes")
app.add_typer(export.app, name="export", help="Export cluster credentials")


# Global options callback
@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """kindctl - local Kubernetes clusters."""
    global debug_mode
    debug_mode = debug
    setup_logging(debug)
    if debug:
        logging.getLogger("kindctl").debug("Debug mode enabled")


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.getLogger("kindctl").error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.getLogger("kindctl").error(f"Error: {e}")
        sys.exit(1)
