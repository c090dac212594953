import json
from typing import Optional

import typer

from bootstrapctl.config import get_config
from bootstrapctl.context import background
from bootstrapctl.exceptions import BootstrapCtlError
from bootstrapctl.models import PhaseIdentity
from bootstrapctl.resources import get_status
from bootstrapctl.store import TenantControlPlaneStore
from bootstrapctl.utils.kube import load_api_client

app = typer.Typer()


def phase_status(tcp):
    """Checksum and last update per phase; empty checksum means never applied."""
    rows = {}
    for phase in PhaseIdentity:
        try:
            status = get_status(phase, tcp)
        except BootstrapCtlError:
            rows[phase.display_name] = {"checksum": "", "lastUpdate": None}
            continue
        rows[phase.display_name] = status.to_dict()
        rows[phase.display_name].setdefault("lastUpdate", None)
    return rows


@app.command("tenant")
def status_tenant(
    name: str = typer.Option(..., help="TenantControlPlane name"),
    namespace: str = typer.Option("default", help="TenantControlPlane namespace"),
    kubeconfig: Optional[str] = typer.Option(None, help="Management cluster kubeconfig"),
    output: str = typer.Option("table", help="Output format: table or json"),
):
    """Show the checksum persisted for every kubeadm phase."""
    config = get_config()
    api_client = load_api_client(kubeconfig or config.kubernetes.kubeconfig, config.kubernetes.context)
    try:
        tcp = TenantControlPlaneStore.from_config(api_client, config).get(background(), name, namespace)
    except BootstrapCtlError as e:
        print(f"❌ {e}")
        raise typer.Exit(code=1)
    finally:
        api_client.close()

    rows = phase_status(tcp)
    if output == "json":
        print(json.dumps(rows, indent=2))
        return

    print(f"📡 Status for TenantControlPlane {namespace}/{name}")
    for phase, row in rows.items():
        checksum = row["checksum"][:12] if row["checksum"] else "<never applied>"
        print(f"  {phase:<28} {checksum:<16} {row['lastUpdate'] or ''}")
