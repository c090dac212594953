import logging
import sys
from typing import Optional

import typer

from bootstrapctl.commands import config, phases, reconcile, status, token
from bootstrapctl.config import set_config, ControllerConfig
from bootstrapctl.exceptions import ConfigurationError
from bootstrapctl.logging import configure_from

app = typer.Typer()

# Global debug flag
debug_mode = False


def setup_logging(debug: bool = False, config_path: Optional[str] = None):
    """Configure logging from the controller config, honouring --debug."""
    controller_config = ControllerConfig.load(config_path)
    if debug:
        controller_config.logging.level = "DEBUG"
    set_config(controller_config)
    configure_from(controller_config)

    # Disable debug logging for noisy libraries
    if not debug:
        logging.getLogger('kubernetes').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)


# Add all command groups
app.add_typer(phases.app, name="phases")
app.add_typer(reconcile.app, name="reconcile")
app.add_typer(status.app, name="status")
app.add_typer(token.app, name="token")
app.add_typer(config.app, name="config")


@app.command("serve")
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Serve the HTTP API."""
    from bootstrapctl.api.main import serve as serve_api
    serve_api(host=host, port=port)


# Global options callback
@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
    config_file: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """bootstrapctl - kubeadm phase reconciliation for tenant control planes."""
    global debug_mode
    debug_mode = debug
    try:
        setup_logging(debug, config_file)
    except ConfigurationError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)
    logging.getLogger("bootstrapctl").debug("Debug mode enabled")


def run():
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
