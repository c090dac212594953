import logging
from typing import List, Optional

import typer

from bootstrapctl.config import get_config
from bootstrapctl.context import ReconcileContext
from bootstrapctl.exceptions import BootstrapCtlError, ContextCancelled
from bootstrapctl.reconciler import Reconciler
from bootstrapctl.utils.kube import load_api_client
from .phases import parse_phases

app = typer.Typer()
logger = logging.getLogger("bootstrapctl.commands.reconcile")


@app.command("tenant")
def reconcile_tenant(
    name: str = typer.Option(..., help="TenantControlPlane name"),
    namespace: str = typer.Option("default", help="TenantControlPlane namespace"),
    phase: Optional[List[str]] = typer.Option(None, "--phase", "-p", help="Only run these phases"),
    kubeconfig: Optional[str] = typer.Option(None, help="Management cluster kubeconfig"),
    timeout: Optional[float] = typer.Option(None, help="Deadline for the whole pass in seconds"),
):
    """Drive the kubeadm phases of a tenant control plane to the desired state."""
    config = get_config()
    phases = parse_phases(phase)

    api_client = load_api_client(kubeconfig or config.kubernetes.kubeconfig, config.kubernetes.context)
    ctx = ReconcileContext(timeout=timeout or config.reconcile.timeout, logger=logger)

    print(f"🔁 Reconciling TenantControlPlane {namespace}/{name}")
    try:
        report = Reconciler(api_client).reconcile(ctx, name, namespace, phases)
    except ContextCancelled as e:
        print(f"⏱️  Reconciliation aborted: {e}")
        raise typer.Exit(code=2)
    except BootstrapCtlError as e:
        if e.report is not None:
            _print_report(e.report)
        print(f"❌ {e}")
        raise typer.Exit(code=1)
    finally:
        api_client.close()

    _print_report(report)


def _print_report(report):
    for result in report.phases:
        if result.error:
            marker = "❌"
        elif result.status_updated:
            marker = "📝"
        else:
            marker = "✅"
        print(f"{marker} {result.phase}: {result.result.value}")
    if report.committed:
        print("💾 Status committed")
