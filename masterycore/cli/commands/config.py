"""Config Commands - Inspect and change the mastery engine configuration."""

import json
from typing import Any

import typer
from rich.console import Console

from masterycore.cli.ui.display import display_config
from masterycore.modules.mastery import get_mastery_engine
from masterycore.shared.exceptions import ConfigPersistenceError, MasteryCoreException
from masterycore.shared.kv_store import RedisKeyValueStore

config_app = typer.Typer(help="Engine configuration commands")
console = Console()


def parse_value(raw: str) -> Any:
    """Interpret a CLI value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def nest_key(key: str, value: Any) -> dict[str, Any]:
    """Turn 'timeWeights.fastBonus' into {'timeWeights': {'fastBonus': value}}."""
    parts = [p for p in key.split(".") if p]
    if not parts:
        raise typer.BadParameter("Key cannot be empty", param_hint="KEY")

    override: Any = value
    for part in reversed(parts):
        override = {part: override}
    return override


def _backend_name(engine) -> str:
    return "redis" if isinstance(engine.store, RedisKeyValueStore) else "memory"


@config_app.command("show")
def show(
    as_json: bool = typer.Option(False, "--json", help="Print the stored camelCase blob"),
) -> None:
    """Show the active engine configuration."""
    engine = get_mastery_engine()

    if as_json:
        typer.echo(json.dumps(engine.config.to_blob(), indent=2))
        return

    display_config(engine.config, engine.config_key, _backend_name(engine))


@config_app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Config key, dotted for nested weights (e.g. difficultyWeights.hard)"),
    value: str = typer.Argument(..., help="New value (parsed as JSON)"),
) -> None:
    """Change one configuration value and persist it."""
    engine = get_mastery_engine()
    override = nest_key(key, parse_value(value))

    try:
        engine.update_config(override)
    except ConfigPersistenceError as e:
        console.print(f"[yellow]Warning:[/yellow] {e.message}")
        console.print("[dim]The new value is active for this process only.[/dim]")
        raise typer.Exit(1)
    except MasteryCoreException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    console.print(f"[green]Updated[/green] {key} = {value}")
    if _backend_name(engine) == "memory":
        console.print("[dim]In-memory store: set FF_USE_REDIS_CONFIG_STORE=true to persist.[/dim]")
