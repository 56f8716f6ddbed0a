from pathlib import Path
from typing import Optional

import typer

from platformctl.config import get_config
from platformctl.errors import PlatformError
from platformctl.loader import dump_descriptor, load_platform_spec
from platformctl.modules.addons import install_tiers
from platformctl.modules.composer import PlatformComposer

app = typer.Typer()


def _compose(file: Path, strict_version: bool = False):
    config = get_config()
    if strict_version:
        config = config.model_copy(update={
            "policy": config.policy.model_copy(update={"strict_version_shim": True})
        })
    spec = load_platform_spec(file, config.capacity.default_instance_type)
    return PlatformComposer(config=config).compose(spec)


@app.command("platform")
def compose_platform_cmd(
    file: Path = typer.Argument(..., help="Platform definition (YAML or JSON)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the descriptor to this file"),
    fmt: str = typer.Option("yaml", "--format", "-f", help="Output format: yaml or json"),
    strict_version: bool = typer.Option(False, help="Fail when no kubectl shim exists for the version"),
):
    """Compose a platform file into a fully resolved descriptor."""
    if fmt not in ("yaml", "json"):
        raise typer.BadParameter("❌ --format must be yaml or json")
    try:
        descriptor = _compose(file, strict_version)
    except PlatformError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    text = dump_descriptor(descriptor, fmt)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text)
        typer.echo(f"✅ Descriptor written to {output}")
    else:
        typer.echo(text)


@app.command("graph")
def compose_graph_cmd(
    file: Path = typer.Argument(..., help="Platform definition (YAML or JSON)"),
):
    """Show the add-on install tiers for a platform file."""
    try:
        descriptor = _compose(file)
    except PlatformError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    before, after = install_tiers(descriptor.addons)
    typer.echo("🧩 Tier 0 (before compute):")
    for node in before:
        typer.echo(f"  - {node.name}")
    typer.echo("🧩 Tier 1 (after all node groups):")
    for node in after:
        deps = ", ".join(node.predecessors) or "-"
        typer.echo(f"  - {node.name} (after: {deps})")
