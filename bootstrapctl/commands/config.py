import typer
import yaml

from bootstrapctl.config import get_config
from bootstrapctl.utils import redact_sensitive_data

app = typer.Typer()


@app.command("show")
def show_config():
    """Print the effective configuration with secrets redacted."""
    config = get_config()
    data = redact_sensitive_data(config.model_dump(exclude={"config_paths"}))
    print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="")
