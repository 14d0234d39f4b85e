"""CLI module for reconciling warehouse objects by hand.

Provides commands to inspect the declared attribute surface, read and
import live objects, and create, update or delete them from a JSON
attribute file.  Mutating commands print what they would do and only
execute with ``--confirm``.

Usage:
    warehouse-reconciler kinds
    warehouse-reconciler kinds user
    warehouse-reconciler profiles
    warehouse-reconciler show database REPORTS
    warehouse-reconciler import schema analytics.raw
    warehouse-reconciler create database --attrs reports.json --confirm
    warehouse-reconciler update role ANALYST --attrs analyst.json --confirm
    warehouse-reconciler delete table ANALYTICS.RAW.EVENTS --confirm

Commands:
    kinds     - List object kinds, or the attributes of one kind
    profiles  - List connection profiles from warehouse.toml
    show      - Read an object by identity
    import    - Normalize an identity and read the object (JSON state)
    create    - Create an object from an attribute file
    update    - Apply changed mutable attributes from an attribute file
    delete    - Drop an object by identity
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from warehouse_reconciler.config import load_config
from warehouse_reconciler.errors import ReconcilerError
from warehouse_reconciler.factory import get_client
from warehouse_reconciler.reconcilers import RECONCILERS, Reconciler, get_reconciler
from warehouse_reconciler.state.data import ResourceData
from warehouse_reconciler.state.models import field_metadata
from warehouse_reconciler.state.surface import describe

console = Console()
err_console = Console(stderr=True)

_MASK = "********"


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_attrs(path: str) -> dict[str, Any]:
    """Load a JSON attribute file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON object.
    """
    attrs_path = Path(path)
    if not attrs_path.exists():
        raise FileNotFoundError(f"Attribute file not found: {attrs_path}")
    data = json.loads(attrs_path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{attrs_path.name} must contain a JSON object")
    return data


def _redacted(data: ResourceData) -> dict[str, Any]:
    """Recorded state with sensitive values masked."""
    payload = data.to_dict()
    for attr in data.model.model_fields:
        if field_metadata(data.model, attr).get("sensitive") and payload.get(attr):
            payload[attr] = _MASK
    return payload


def _has_secrets(desired: Any) -> bool:
    return any(
        field_metadata(type(desired), attr).get("sensitive") and getattr(desired, attr)
        for attr in type(desired).model_fields
    )


def _print_state(data: ResourceData, title: str) -> None:
    table = Table(title=title, show_header=False)
    table.add_column("Attribute", style="dim")
    table.add_column("Value")
    for key, value in _redacted(data).items():
        table.add_row(key, "" if value is None else escape(str(value)))
    console.print(table)


def _reconciler(args: argparse.Namespace) -> Reconciler:
    client = get_client(args.profile, Path(args.config) if args.config else None)
    return get_reconciler(args.kind, client)


# ============================================================================
# Commands
# ============================================================================


def cmd_kinds(args: argparse.Namespace) -> int:
    """List object kinds, or the declared attributes of one kind.

    Reads only the state models -- no warehouse calls.

    Returns:
        0 on success, 1 for an unknown kind.
    """
    if not args.kind:
        table = Table(title="Object Kinds", show_header=True, header_style="bold")
        table.add_column("Kind")
        table.add_column("Identity")
        table.add_column("Mutable attributes")
        for kind, cls in RECONCILERS.items():
            identity = ".".join(f.removesuffix("_name").upper() for f in cls.model.identity_fields)
            if kind.endswith("_grant"):
                identity = "GRANTEE.DB.SCHEMA.OBJECT.PRIV[.PRIV...]"
            table.add_row(kind, identity, ", ".join(cls.update_order) or "[dim]none[/dim]")
        console.print(table)
        return 0

    kind = args.kind.strip().lower()
    if kind not in RECONCILERS:
        console.print(f"[red]Unknown kind {args.kind!r}. Available: {', '.join(RECONCILERS)}[/red]")
        return 1

    table = Table(title=f"{kind} attributes", show_header=True, header_style="bold")
    table.add_column("Attribute")
    table.add_column("Type")
    table.add_column("Presence")
    table.add_column("Mutability")
    table.add_column("Default")
    table.add_column("Normalize")
    for spec in describe(RECONCILERS[kind].model):
        table.add_row(
            spec.name,
            spec.type,
            spec.presence,
            spec.mutability,
            "" if spec.required else repr(spec.default),
            spec.normalize or "",
        )
    console.print(table)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List connection profiles from warehouse.toml.

    Returns:
        0 on success, 1 if warehouse.toml not found.
    """
    try:
        config = load_config(Path(args.config) if args.config else None)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    table = Table(title="Connection Profiles", show_header=True, header_style="bold")
    table.add_column("Profile")
    table.add_column("Description")
    for name, profile in config.profiles.items():
        table.add_row(name, profile.description or "")
    console.print(table)
    console.print(
        f"\n[dim]Pool:[/dim] size={config.pool.size} max_overflow={config.pool.max_overflow}"
    )
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Read an object by identity and print its recorded state."""
    reconciler = _reconciler(args)
    data = reconciler.read(ResourceData(reconciler.model, id=args.id))
    _print_state(data, f"{reconciler.kind} {data.get_id()}")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Normalize an identity, read the object and print JSON state."""
    reconciler = _reconciler(args)
    data = reconciler.import_(args.id)
    console.print_json(data={"kind": reconciler.kind, **_redacted(data)})
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    """Create an object from an attribute file (preview without --confirm)."""
    reconciler = _reconciler(args)
    desired = reconciler.model.from_attributes(_load_attrs(args.attrs))

    console.print(f"[bold]{reconciler.kind}[/bold] [cyan]{desired.identity()}[/cyan]")
    if _has_secrets(desired):
        console.print("[dim]statement contains secrets; not shown[/dim]")
    else:
        console.print(reconciler.create_statement(desired), markup=False)

    if not args.confirm:
        console.print("\n[yellow]Preview only.[/yellow] Re-run with --confirm to create.")
        return 0

    data = reconciler.create(ResourceData(reconciler.model, desired=desired))
    console.print(f"[bold green]v[/bold green] Created {data.get_id()}")
    return 0


def cmd_update(args: argparse.Namespace) -> int:
    """Apply changed mutable attributes (preview without --confirm)."""
    reconciler = _reconciler(args)
    desired = reconciler.model.from_attributes(_load_attrs(args.attrs))

    # Current state is the baseline for change detection
    current = reconciler.read(ResourceData(reconciler.model, id=args.id))
    data = ResourceData(reconciler.model, desired=desired, state=current.state, id=current.get_id())

    pending = [attr for attr in reconciler.update_order if data.has_changed(attr)]
    if not pending:
        console.print("[green]No changes.[/green]")
        return 0
    console.print(f"Pending changes for {data.get_id()}: [cyan]{', '.join(pending)}[/cyan]")

    if not args.confirm:
        console.print("\n[yellow]Preview only.[/yellow] Re-run with --confirm to apply.")
        return 0

    try:
        reconciler.update(data)
    except ReconcilerError:
        if data.applied:
            console.print(f"[yellow]Applied before failure:[/yellow] {', '.join(data.applied)}")
        raise
    console.print(f"[bold green]v[/bold green] Updated {data.get_id()}: {', '.join(data.applied)}")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Drop an object by identity (preview without --confirm)."""
    reconciler = _reconciler(args)
    if not args.confirm:
        console.print(f"Would delete {reconciler.kind} [cyan]{args.id.upper()}[/cyan]")
        console.print("\n[yellow]Preview only.[/yellow] Re-run with --confirm to delete.")
        return 0

    data = ResourceData(reconciler.model, id=args.id.strip().upper())
    reconciler.delete(data)
    console.print(f"[bold green]v[/bold green] Deleted {args.id.upper()}")
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = argparse.ArgumentParser(
        prog="warehouse-reconciler",
        description="Reconcile warehouse catalog objects against declared state",
    )
    parser.add_argument(
        "--profile",
        default=None,
        help="Connection profile from warehouse.toml (default: WAREHOUSE_PROFILE, then SNOWFLAKE_DSN)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to warehouse.toml (default: ./warehouse.toml)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every statement (DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # kinds command
    p_kinds = subparsers.add_parser("kinds", help="List object kinds or one kind's attributes")
    p_kinds.add_argument("kind", nargs="?", help="Object kind (e.g., database)")
    p_kinds.set_defaults(func=cmd_kinds)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List connection profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    # show command
    p_show = subparsers.add_parser("show", help="Read an object by identity")
    p_show.add_argument("kind", help="Object kind")
    p_show.add_argument("id", help="Identity (e.g., ANALYTICS.RAW)")
    p_show.set_defaults(func=cmd_show)

    # import command
    p_import = subparsers.add_parser("import", help="Import an object by identity (JSON state)")
    p_import.add_argument("kind", help="Object kind")
    p_import.add_argument("id", help="Identity; upper-cased before lookup")
    p_import.set_defaults(func=cmd_import)

    # create command
    p_create = subparsers.add_parser("create", help="Create an object from an attribute file")
    p_create.add_argument("kind", help="Object kind")
    p_create.add_argument("--attrs", required=True, help="Path to JSON attribute file")
    p_create.add_argument("--confirm", action="store_true", help="Execute the statement")
    p_create.set_defaults(func=cmd_create)

    # update command
    p_update = subparsers.add_parser("update", help="Apply changed mutable attributes")
    p_update.add_argument("kind", help="Object kind")
    p_update.add_argument("id", help="Current identity")
    p_update.add_argument("--attrs", required=True, help="Path to JSON attribute file")
    p_update.add_argument("--confirm", action="store_true", help="Execute the statements")
    p_update.set_defaults(func=cmd_update)

    # delete command
    p_delete = subparsers.add_parser("delete", help="Drop an object by identity")
    p_delete.add_argument("kind", help="Object kind")
    p_delete.add_argument("id", help="Identity")
    p_delete.add_argument("--confirm", action="store_true", help="Execute the drop")
    p_delete.set_defaults(func=cmd_delete)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        return args.func(args)
    except ReconcilerError as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
