from typing import List, Optional

import typer

from platformctl.config import get_config
from platformctl.modules.capacity import CapacityTable
from platformctl.modules.versions import ShimTable

app = typer.Typer()


@app.command("max-pods")
def max_pods_cmd(
    instance_types: List[str] = typer.Argument(..., help="One or more EC2 instance types"),
    default: Optional[int] = typer.Option(None, help="Value for unknown instance types"),
):
    """Show the max pods per instance type and the effective group value."""
    if default is None:
        default = get_config().capacity.default_max_pods
    table = CapacityTable()
    for instance_type in instance_types:
        marker = "" if instance_type in table else " (default)"
        typer.echo(f"{instance_type}: {table.max_pods(instance_type, default)}{marker}")
    if len(instance_types) > 1:
        typer.echo(f"effective: {table.effective_max_pods(instance_types, default)}")


@app.command("shim")
def shim_cmd(version: str = typer.Argument(..., help="Kubernetes minor version, e.g. 1.33")):
    """Show the kubectl shim for a Kubernetes version."""
    resolution = ShimTable().select(version)
    if not resolution.resolved:
        typer.echo(f"❌ {resolution.reason}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{version}: {resolution.shim_id}")
