import typer

from bootstrapctl.exceptions import EnrichmentError
from bootstrapctl.resources import generate_token

app = typer.Typer()


@app.command("generate")
def generate():
    """Print a random bootstrap token (<id>.<secret>)."""
    try:
        print(generate_token())
    except EnrichmentError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)
