"""
Vote Cart CLI

Command-line interface for staging votes in a cart kept in SQLite.
Protocol constants are read from a JSON file; without one, cost views
report that the configuration is still loading.

Usage:
    votecart add --scope founder-1 --subject 0xabc --relation has-quality \\
        --direction support --amount 0.5
    votecart show --scope founder-1
    votecart set-amount --scope founder-1 --id <item_id> --amount 1.25
    votecart summary --scope founder-1 --config protocol.json
    votecart afford --scope founder-1 --config protocol.json --balance 2
    votecart validate --scope founder-1 --config protocol.json
"""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from vote_cart.cart.amounts import parse_amount, truncate_amount
from vote_cart.cart.commands import AddVoteIntent
from vote_cart.cart.models import Curve, Direction, ExistingPosition, NewClaimData
from vote_cart.kernel.errors import (
    CartItemNotFound,
    InvariantViolation,
    ParseError,
)
from vote_cart.kernel.logging import configure_logging, is_production, start_event
from vote_cart.kernel.protocol import ProtocolConfig
from vote_cart.session import VoteSession

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=is_production(), log_level="INFO")

app = typer.Typer(
    name="votecart",
    help="Vote Cart - stage, cost and validate votes before submitting them",
    add_completion=False,
)


@app.callback()
def on_command() -> None:
    """Vote Cart - stage, cost and validate votes before submitting them"""
    start_event()


DEFAULT_DB = Path(".votecart.db")

ScopeOption = Annotated[str, typer.Option("--scope", help="Subject scope ID")]
DbOption = Annotated[
    Path,
    typer.Option("--db", envvar="VOTECART_DB", help="Cart database path"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", envvar="VOTECART_CONFIG", help="Protocol configuration (JSON)"),
]


def load_config(config_path: Optional[Path]) -> ProtocolConfig | None:
    """Read protocol configuration, None if no file is given"""
    if config_path is None:
        return None
    if not config_path.exists():
        typer.echo(f"Error: Config file not found: {config_path}", err=True)
        raise typer.Exit(1)
    try:
        return ProtocolConfig.from_mapping(json.loads(config_path.read_text()))
    except (ValueError, KeyError) as e:
        typer.echo(f"Error: Invalid protocol configuration: {e}", err=True)
        raise typer.Exit(1)


def get_session(
    scope: str,
    db: Path,
    config_path: Optional[Path] = None,
    balance: int | None = None,
    scope_label: Optional[str] = None,
) -> VoteSession:
    """
    Open the session and restore the scope's cart as stored

    The config is attached after restore, so views report the stored
    amounts instead of repairing them.
    """
    config = load_config(config_path)
    session = VoteSession.open(db, balance=balance)
    session.store.init(scope, scope_label or scope)
    session.config_provider.config = config
    return session


def fmt(minor: int) -> str:
    return truncate_amount(minor)


def parse_or_exit(text: str, what: str = "amount") -> int:
    try:
        return parse_amount(text)
    except ParseError as e:
        typer.echo(f"Error: Invalid {what}: {e.reason}", err=True)
        raise typer.Exit(1)


# Cart commands


@app.command()
def add(
    scope: ScopeOption,
    relation: Annotated[str, typer.Option("--relation", help="Relation (predicate) ID")],
    direction: Annotated[Direction, typer.Option("--direction", help="support or oppose")],
    amount: Annotated[str, typer.Option("--amount", help="Deposit, e.g. 0.5")],
    subject: Annotated[
        Optional[str],
        typer.Option("--subject", help="Existing subject ID"),
    ] = None,
    new_subject: Annotated[
        Optional[str],
        typer.Option("--new-subject", help="Name of a subject to create"),
    ] = None,
    category: Annotated[
        Optional[str],
        typer.Option("--category", help="Category of the new subject"),
    ] = None,
    new_category: Annotated[
        bool,
        typer.Option("--new-category", help="The category must be created too"),
    ] = False,
    label: Annotated[
        Optional[str],
        typer.Option("--label", help="Display label of the subject"),
    ] = None,
    curve: Annotated[Curve, typer.Option("--curve", help="linear or progressive")] = Curve.LINEAR,
    new_claim: Annotated[
        bool,
        typer.Option("--new-claim", help="The claim does not exist yet"),
    ] = False,
    held: Annotated[
        Optional[Direction],
        typer.Option("--held", help="Direction of a position already held on the claim"),
    ] = None,
    held_curve: Annotated[
        Curve,
        typer.Option("--held-curve", help="Curve of the held position"),
    ] = Curve.LINEAR,
    held_shares: Annotated[
        str,
        typer.Option("--held-shares", help="Shares of the held position"),
    ] = "0",
    redeem: Annotated[
        bool,
        typer.Option("--redeem", help="Redeem an opposing held position first"),
    ] = False,
    scope_label: Annotated[
        Optional[str],
        typer.Option("--scope-label", help="Scope display name for a new cart"),
    ] = None,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Stage a vote (amounts accumulate on the same subject, direction and curve)"""
    session = get_session(scope, db, scope_label=scope_label)
    minor = parse_or_exit(amount)

    pending = None
    if new_subject is not None:
        if category is None:
            typer.echo("Error: --category is required with --new-subject", err=True)
            raise typer.Exit(1)
        pending = NewClaimData(name=new_subject, category=category, is_new_category=new_category)

    existing = None
    if held is not None:
        existing = ExistingPosition(
            direction=held,
            curve=held_curve,
            shares=parse_or_exit(held_shares, "shares"),
        )

    try:
        command = AddVoteIntent(
            subject_key=subject,
            subject_label=label or "",
            relation_id=relation,
            direction=direction,
            curve=curve,
            amount=minor,
            is_new_claim=new_claim,
            pending_creation=pending,
            existing_position=existing,
            redeem_confirmed=redeem,
        )
    except ValidationError as e:
        typer.echo(f"Error: Invalid vote: {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(1)

    try:
        item = session.store.add_item(command)
    except InvariantViolation as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✓ Staged vote: {item.id}")
    typer.echo(f"  Subject: {item.subject_label}")
    typer.echo(f"  Direction: {item.direction.label()} ({item.curve.label()})")
    typer.echo(f"  Amount: {fmt(item.amount)}")
    if item.needs_withdraw:
        typer.echo(f"  Redeems first: {len(item.redemptions())} position(s)")


@app.command()
def show(
    scope: ScopeOption,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Show the staged votes"""
    session = get_session(scope, db)
    cart = session.cart

    if json_output:
        typer.echo(cart.model_dump_json(indent=2))
        return

    if cart.is_empty():
        typer.echo(f"Cart for {cart.scope_label} is empty")
        return

    typer.echo(f"Cart for {cart.scope_label} ({cart.item_count} items):")
    for item in cart.items:
        flags = []
        if item.is_new_claim:
            flags.append("new claim")
        if item.needs_withdraw:
            flags.append("redeems first")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        typer.echo(
            f"  {item.id}: {item.subject_label} "
            f"{item.direction.label()}/{item.curve.label()} {fmt(item.amount)}{suffix}"
        )


@app.command()
def remove(
    scope: ScopeOption,
    item_id: Annotated[str, typer.Option("--id", help="Cart item ID")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Remove one staged vote"""
    session = get_session(scope, db)
    try:
        session.store.remove_item(item_id)
    except CartItemNotFound as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Removed: {item_id}")


@app.command("set-amount")
def set_amount(
    scope: ScopeOption,
    item_id: Annotated[str, typer.Option("--id", help="Cart item ID")],
    amount: Annotated[str, typer.Option("--amount", help="New amount, e.g. 1.25")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Replace the amount of one staged vote"""
    session = get_session(scope, db)
    try:
        updated = session.store.update_amount(item_id, amount)
    except CartItemNotFound as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    item = session.cart.get(item_id)
    if not updated:
        typer.echo(f"Invalid amount {amount!r}, keeping {fmt(item.amount)}")
        return
    typer.echo(f"✓ Amount of {item_id}: {fmt(item.amount)}")


@app.command("set-direction")
def set_direction(
    scope: ScopeOption,
    item_id: Annotated[str, typer.Option("--id", help="Cart item ID")],
    direction: Annotated[Direction, typer.Option("--direction", help="support or oppose")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Change the direction of one staged vote"""
    session = get_session(scope, db)
    try:
        item = session.store.update_direction(item_id, direction)
    except (CartItemNotFound, InvariantViolation) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Direction of {item_id}: {item.direction.label()}")


@app.command()
def clear(
    scope: ScopeOption,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Remove every staged vote"""
    session = get_session(scope, db)
    session.store.clear_cart()
    typer.echo(f"✓ Cleared cart: {scope}")


# Derived views


@app.command()
def summary(
    scope: ScopeOption,
    config: ConfigOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Show what the cart costs"""
    session = get_session(scope, db, config)
    costs = session.cost_summary()

    if costs is None:
        typer.echo("Protocol configuration loading - costs unavailable")
        return

    if json_output:
        typer.echo(costs.model_dump_json(indent=2))
        return

    shown = costs.display(session.settings)
    typer.echo(f"Cost summary for {session.cart.scope_label}:")
    typer.echo(f"  Deposits: {shown.total_deposits}")
    typer.echo(f"  Claim creation: {shown.claim_creation_costs} ({costs.new_claim_count} new claims)")
    typer.echo(f"  Effective deposit: {shown.effective_deposits}")
    typer.echo(f"  Entry fees: {shown.estimated_entry_fees}")
    typer.echo(f"  Withdrawable: {shown.total_withdrawable} ({costs.withdraw_count} redemptions)")
    typer.echo(f"  Net cost: {shown.net_cost}")


@app.command()
def afford(
    scope: ScopeOption,
    balance: Annotated[str, typer.Option("--balance", help="Wallet balance, e.g. 2.5")],
    config: ConfigOption = None,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Check which staged votes the balance can pay for"""
    session = get_session(scope, db, config, balance=parse_or_exit(balance, "balance"))
    report = session.affordability()

    if report is None:
        typer.echo("Protocol configuration loading - affordability unavailable")
        return

    status = "fits" if report.global_can_afford else f"short by {fmt(report.shortfall)}"
    typer.echo(
        f"Total with fees: {fmt(report.total_cost_with_fees)} ({status}); "
        f"{report.total_affordable} affordable, {report.total_blocked} blocked"
    )
    for item in session.cart.items:
        row = report.items[item.id]
        badge = "ok" if row.can_afford else "insufficient"
        typer.echo(f"  {item.id}: {badge} (max {fmt(row.max_affordable_amount)})")


@app.command()
def validate(
    scope: ScopeOption,
    config: ConfigOption = None,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Check the cart against the protocol minimums"""
    session = get_session(scope, db, config)
    result = session.validation()

    if result.is_valid:
        typer.echo("✓ Cart is valid")
        return

    typer.echo("Cart is not valid:")
    for error in result.errors:
        typer.echo(f"  - {error}")
    raise typer.Exit(1)


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
