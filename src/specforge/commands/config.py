"""Config commands -- view and modify the global configuration.

Provides the ``specforge config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~specforge.models.GlobalConfig`). The file lives in the specforge
config directory and holds the defaults for ``default_spec``, the output
format, the schema expansion depth, and strict route conflicts.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError

from specforge.exceptions import SpecForgeError
from specforge.exit_codes import EXIT_INVALID_USAGE
from specforge.models import GlobalConfig
from specforge.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


def _load() -> GlobalConfig:
    from specforge.config import load_global_config

    try:
        return load_global_config()
    except SpecForgeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _save(config: GlobalConfig) -> None:
    from specforge.config import save_global_config

    try:
        save_global_config(config)
    except OSError as exc:
        error(f"Could not write config: {exc}")
        raise typer.Exit(code=1) from None


@config_app.command("show")
def config_show() -> None:
    """Show the stored global configuration.

    Environment variables and ``./specforge.json`` are not applied here.

    Example::

        specforge config show
        specforge --json config show
    """
    from specforge.config import get_config_dir

    config = _load()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key in dot notation, e.g. 'resolver.max_depth'."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is converted to the type of the field it replaces (bool, int,
    or text) and the whole config is validated before it is written.

    Example::

        specforge config set default_spec ./openapi.yaml
        specforge config set output.format json
        specforge config set routes.strict_conflicts true
    """
    data = _load().model_dump(mode="json")

    *parents, final_key = key.split(".")
    target: dict[str, Any] = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]

    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    coerced: Any = value
    if isinstance(current, bool):
        coerced = value.strip().lower() in ("1", "true", "yes", "on")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    target[final_key] = coerced
    try:
        config = GlobalConfig.model_validate(data)
    except PydanticValidationError as exc:
        error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    _save(config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Reset the global configuration to defaults.

    Example::

        specforge config reset --yes
    """
    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    _save(GlobalConfig())
    success("Configuration reset to defaults.")
