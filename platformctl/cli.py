import logging
import sys

import typer

from platformctl.commands import compose, config, lookup
from platformctl.config import get_config
from platformctl.logging import setup_logger

app = typer.Typer()

debug_mode = False


def setup_logging(debug: bool = False):
    """Configure logging based on debug mode and the configured level."""
    settings = get_config().logging
    log_level = logging.DEBUG if debug else getattr(logging, settings.level, logging.INFO)
    setup_logger("platformctl", log_level, settings.file, stream=sys.stderr)
    if not debug:
        logging.getLogger('uvicorn.access').setLevel(logging.WARNING)


app.add_typer(compose.app, name="compose", help="Compose platform descriptors")
app.add_typer(lookup.app, name="lookup", help="Capacity and version lookups")
app.add_typer(config.app, name="config", help="Manage the configuration file")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
):
    """Serve the composition API."""
    import uvicorn

    uvicorn.run("platformctl.api.main:app", host=host, port=port)


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """platformctl - EKS platform composition CLI."""
    global debug_mode
    debug_mode = debug
    setup_logging(debug)
    if debug:
        logging.getLogger("platformctl").debug("Debug mode enabled")


if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)
