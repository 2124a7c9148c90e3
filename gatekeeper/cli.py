"""CLI entry point for Gatekeeper."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from gatekeeper.authorizer import UnifiedAuthorizer, create_authorizer
from gatekeeper.config import GatekeeperConfig, load_config
from gatekeeper.config.loader import DEFAULT_CONFIG_TEMPLATE
from gatekeeper.errors import GatekeeperError
from gatekeeper.logs import configure_logging
from gatekeeper.plugins import PluginLoader

app = typer.Typer(
    name="gatekeeper",
    help="RBAC + ABAC authorization engine: inspect roles and policies, dry-run checks.",
)

config_app = typer.Typer(help="Manage Gatekeeper configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: GatekeeperConfig | None = None


def _get_config() -> GatekeeperConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to gatekeeper.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(2)
    configure_logging(_config.log_level, _config.log_format)


def _parse_attributes(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as YAML scalars or lists."""
    attrs: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}")
        try:
            attrs[key] = yaml.safe_load(raw) if raw else ""
        except yaml.YAMLError as e:
            raise typer.BadParameter(f"cannot parse value for {key!r}: {e}") from e
    return attrs


def _build_authorizer() -> UnifiedAuthorizer:
    """Wire an authorizer from config. Plugin and registration errors exit with 2."""
    try:
        return create_authorizer(_get_config())
    except GatekeeperError as e:
        rprint(f"[red]ERROR[/red] {escape(str(e))}")
        raise typer.Exit(2)


@app.command()
def roles() -> None:
    """Show the role -> permission table."""
    authorizer = _build_authorizer()
    table = Table(title="Roles")
    table.add_column("Role", style="cyan")
    table.add_column("Permissions", style="green")
    for role, perms in authorizer.registry.get_role_permissions().items():
        table.add_row(role, "\n".join(perms) if perms else "-")
    rprint(table)


@app.command()
def policies() -> None:
    """Show registered ABAC policies in evaluation order."""
    authorizer = _build_authorizer()
    engine = authorizer.engine
    table = Table(title=f"Policies (combiner: {engine.policy_combiner.name})")
    table.add_column("#", justify="right")
    table.add_column("Policy", style="cyan")
    table.add_column("Priority", justify="right")
    for i, policy in enumerate(engine.get_policies(), start=1):
        table.add_row(str(i), policy.name, str(policy.priority))
    rprint(table)


@app.command()
def plugins() -> None:
    """List entry-point plugins visible in this environment."""
    found = PluginLoader(_get_config()).discover()
    table = Table(title="Plugins")
    table.add_column("Type", style="cyan")
    table.add_column("Names", style="green")
    for plugin_type, names in found.items():
        table.add_row(plugin_type, ", ".join(names) if names else "-")
    rprint(table)


@app.command()
def check(
    user_id: str = typer.Argument(..., help="Subject user id"),
    role: str = typer.Argument(..., help="Subject role"),
    action: str = typer.Argument(..., help="Permission, e.g. internship:update"),
    resource_type: str = typer.Option("internship", "--resource-type", "-t"),
    resource_id: str = typer.Option("", "--resource-id", "-r"),
    user_attr: list[str] = typer.Option([], "--user-attr", "-u", help="key=value, repeatable"),
    resource_attr: list[str] = typer.Option(
        [], "--resource-attr", "-a", help="key=value, repeatable"
    ),
) -> None:
    """Dry-run an authorization check. Exit code 0 on allow, 1 on deny, 2 on error."""
    builder = (
        _build_authorizer()
        .builder()
        .for_user(user_id, role)
        .on_resource(resource_type, resource_id)
        .with_action(action)
    )
    for key, value in _parse_attributes(user_attr).items():
        builder.with_user_attribute(key, value)
    for key, value in _parse_attributes(resource_attr).items():
        builder.with_resource_attribute(key, value)

    try:
        allowed = asyncio.run(builder.check())
    except GatekeeperError as e:
        rprint(f"[red]ERROR[/red] {escape(str(e))}")
        raise typer.Exit(2)

    if allowed:
        rprint(f"[green]ALLOW[/green] {user_id} ({role}) {action} on {resource_type}:{resource_id}")
        return
    rprint(f"[red]DENY[/red] {user_id} ({role}) {action} on {resource_type}:{resource_id}")
    raise typer.Exit(1)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default gatekeeper.yaml in current directory."""
    target = Path("gatekeeper.yaml")
    if target.exists() and not force:
        rprint("[yellow]gatekeeper.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
