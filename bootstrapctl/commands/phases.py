import typer

from bootstrapctl.models import PhaseIdentity
from bootstrapctl.resources import resource_name

app = typer.Typer()


@app.command("list")
def list_phases():
    """List the kubeadm phases in the order they are reconciled."""
    for phase in PhaseIdentity:
        print(f"{phase.display_name:<28} {resource_name(phase)}")


def parse_phases(values):
    """Map --phase values (display names or resource names) to phases."""
    if not values:
        return None
    lookup = {p.display_name.lower(): p for p in PhaseIdentity}
    lookup.update({resource_name(p): p for p in PhaseIdentity})
    selected = []
    for value in values:
        phase = lookup.get(value.lower())
        if phase is None:
            raise typer.BadParameter(f"unknown phase: {value}", param_hint="--phase")
        selected.append(phase)
    return selected
