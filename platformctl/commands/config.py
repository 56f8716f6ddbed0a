"""Configuration file management commands."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import typer
import yaml
from pydantic import ValidationError

from platformctl.config import DEFAULT_CONFIG_PATHS, ComposerConfig, find_config_file

app = typer.Typer()

logger = logging.getLogger("platformctl.commands.config")


def create_config_file(output_path: Optional[Union[str, Path]] = None, overwrite: bool = False) -> Path:
    """Create a configuration file with default values.

    Raises:
        FileExistsError: If the file exists and overwrite is False.
    """
    if output_path is None:
        output_path = DEFAULT_CONFIG_PATHS[-1]
    output_path = Path(output_path).expanduser().absolute()

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"File already exists: {output_path}")

    ComposerConfig().save(output_path)
    logger.info(f"Created configuration file: {output_path}")
    return output_path


def validate_config_file(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Validate a configuration file and report errors and warnings."""
    config_path = Path(config_path).expanduser().absolute()
    result: Dict[str, Any] = {
        'valid': False,
        'path': str(config_path),
        'exists': config_path.exists(),
        'errors': [],
        'warnings': [],
    }

    if not result['exists']:
        result['errors'].append(f"File does not exist: {config_path}")
        return result

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        result['errors'].append(f"Invalid YAML: {e}")
        return result

    if not isinstance(data, dict):
        result['errors'].append("Top level of the configuration must be a mapping")
        return result

    try:
        config = ComposerConfig(**data)
    except ValidationError as e:
        result['errors'].append(f"Invalid configuration: {e}")
        return result

    unknown = sorted(set(data) - set(ComposerConfig.model_fields))
    if unknown:
        result['warnings'].append(f"Unknown sections ignored: {', '.join(unknown)}")
    if not config.policy.validate_labels:
        result['warnings'].append("Label validation is disabled; malformed labels reach bootstrap payloads")

    result['valid'] = True
    result['config'] = config.model_dump()
    return result


@app.command("create")
def create_cmd(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Create a configuration file with default values."""
    try:
        path = create_config_file(output, overwrite=force)
    except FileExistsError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Created configuration file: {path}")


@app.command("validate")
def validate_cmd(config_file: Optional[Path] = typer.Argument(None, help="Configuration file to validate")):
    """Validate a configuration file."""
    path = config_file or find_config_file()
    if path is None:
        typer.echo("No configuration file found.")
        raise typer.Exit(code=1)

    result = validate_config_file(path)
    if result['valid']:
        typer.echo(f"✅ Configuration is valid: {result['path']}")
        for warning in result['warnings']:
            typer.echo(f"  ⚠️  {warning}")
    else:
        typer.echo(f"❌ Configuration is invalid: {result['path']}")
        for error in result['errors']:
            typer.echo(f"  ❌ {error}")
        raise typer.Exit(code=1)


@app.command("show")
def show_cmd():
    """Show the effective configuration and where it was loaded from."""
    config = ComposerConfig.load()
    loaded_from = find_config_file()
    typer.echo(f"Loaded from: {loaded_from or 'default values'}")
    typer.echo("-" * 60)
    typer.echo(yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False))
    typer.echo("Note: override with PLATFORMCTL_<SECTION>__<FIELD>, e.g. PLATFORMCTL_POLICY__STRICT_VERSION_SHIM=true")
