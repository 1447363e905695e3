"""CLI entry point - candle-sim command line interface."""

import sys
import time
from typing import NoReturn

import click

from candle_sim import __version__
from candle_sim.config import get_settings
from candle_sim.session import MarketSession
from candle_sim.types import LedgerError, OrderResult
from candle_sim.utils.logging import get_logger, setup_logging

_ERROR_MESSAGES: dict[LedgerError, str] = {
    LedgerError.INVALID_AMOUNT: "Invalid amount",
    LedgerError.AMOUNT_TOO_SMALL: "Amount too small",
    LedgerError.POSITION_ALREADY_OPEN: "You must exit your current position first",
    LedgerError.NO_OPEN_POSITION: "No open position to exit",
    LedgerError.NO_PRICE_AVAILABLE: "No price available yet",
    LedgerError.INSUFFICIENT_FUNDS: "Insufficient funds",
    LedgerError.INSUFFICIENT_FUNDS_TO_COVER: "Insufficient funds to cover short position",
}


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show the version")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """candle-sim - single-instrument practice trading venue.

    Random-walk candles and a one-position cash ledger.
    """
    if version:
        click.echo(f"candle-sim version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option("--ticks", "-n", type=click.IntRange(min=0), default=0, help="Extra ticks after warmup")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the snapshot as JSON")
def once(ticks: int, as_json: bool) -> None:
    """Warm up a session, advance it and print a snapshot."""
    settings = get_settings()
    # Keep stdout clean for the JSON payload.
    setup_logging(settings, stream=sys.stderr if as_json else None)

    session = MarketSession(settings)
    session.warmup()
    for _ in range(ticks):
        session.tick()

    if as_json:
        click.echo(session.snapshot().model_dump_json(indent=2))
        return

    frame = session.candles_frame()
    click.echo(frame.tail(10).to_string(index=False))
    click.echo()
    _echo_account(session)


@cli.command()
@click.option("--interval-ms", "-i", type=click.IntRange(min=10), default=None, help="Tick period (ms)")
@click.option("--max-ticks", type=click.IntRange(min=1), default=None, help="Stop after N ticks")
def loop(interval_ms: int | None, max_ticks: int | None) -> NoReturn:
    """Tick the market on a fixed interval.

    Use Ctrl+C to stop.
    """
    settings = get_settings()
    setup_logging(settings)
    logger = get_logger("candle_sim.main")

    interval_sec = (interval_ms if interval_ms is not None else settings.candle_interval_ms) / 1000.0
    session = MarketSession(settings)
    session.warmup()

    logger.info(
        "starting_loop",
        interval_sec=interval_sec,
        max_ticks=max_ticks,
        max_candles=settings.max_candles,
    )

    iteration = 0
    try:
        while max_ticks is None or iteration < max_ticks:
            iteration += 1
            candle = session.tick()
            logger.info(
                "tick",
                iteration=iteration,
                close=candle.close,
                change_pct=session.price_change_pct(),
                volume=candle.volume,
            )
            time.sleep(interval_sec)
    except KeyboardInterrupt:
        logger.info("loop_stopped", message="User stopped loop", total_iterations=iteration)
        sys.exit(0)

    logger.info("loop_completed", total_iterations=iteration)
    sys.exit(0)


@cli.command()
@click.argument("action", type=click.Choice(["buy", "short", "fund"]))
@click.option("--amount", "-a", default="1000", help="Order or funding amount in USD")
@click.option("--ticks", "-n", type=click.IntRange(min=0), default=10, help="Ticks to hold before exiting")
def trade(action: str, amount: str, ticks: int) -> None:
    """Run one action on a fresh session, hold, then exit."""
    settings = get_settings()
    setup_logging(settings)

    session = MarketSession(settings)
    session.warmup()

    if action == "fund":
        result = session.add_funds(amount)
    elif action == "buy":
        result = session.buy(amount)
    else:
        result = session.short(amount)
    _check(result)
    record = result.record
    if record is not None and record.quantity is not None:
        click.echo(f"{record.kind.value} {record.quantity:.{settings.quantity_decimals}f} @ ${record.price:.2f}")
    elif record is not None:
        click.echo(f"Added ${record.amount:.2f} to your account")

    for _ in range(ticks):
        session.tick()

    if session.ledger.position.is_open:
        result = _check(session.exit())
        pnl = result.record.realized_pnl if result.record else 0.0
        label = "Profit" if pnl >= 0 else "Loss"
        click.echo(f"Position exited. {label}: ${pnl:.2f}")

    click.echo()
    _echo_account(session)


@cli.command()
def status() -> None:
    """Show the configuration summary."""
    settings = get_settings()
    setup_logging(settings)

    click.echo("=" * 50)
    click.echo("candle-sim - Status")
    click.echo("=" * 50)
    click.echo()

    click.echo("[Market]")
    click.echo(f"   Tick interval: {settings.candle_interval_ms} ms")
    click.echo(f"   History capacity: {settings.max_candles} candles")
    click.echo(f"   Warmup: {settings.warmup_candles} candles")
    click.echo(f"   Initial price: ${settings.initial_price:.2f}")
    click.echo(f"   Sigma per tick: {settings.price_sigma}")
    click.echo(f"   Max jump: {settings.max_jump_pct:.2%}")
    click.echo(f"   Volume range: [{settings.volume_min}, {settings.volume_max})")
    click.echo(f"   Seed: {settings.random_seed if settings.random_seed is not None else 'random'}")
    click.echo()

    click.echo("[Ledger]")
    click.echo(f"   Initial balance: ${settings.initial_balance:.2f}")
    click.echo(f"   Quantity decimals: {settings.quantity_decimals}")
    click.echo()

    click.echo("[Logging]")
    click.echo(f"   Log level: {settings.log_level}")
    click.echo(f"   Log format: {settings.log_format.value}")
    click.echo()
    click.echo("=" * 50)


@cli.command()
def check() -> None:
    """Check runtime dependencies."""
    setup_logging()
    logger = get_logger("candle_sim.main")

    click.echo("Checking system dependencies...")
    click.echo()

    all_ok = True
    packages = [
        ("pydantic", "Configuration validation"),
        ("pydantic_settings", "Settings loading"),
        ("numpy", "Random number generation"),
        ("pandas", "Candle frames"),
        ("structlog", "Structured logging"),
        ("click", "CLI framework"),
    ]

    for pkg_name, desc in packages:
        try:
            __import__(pkg_name)
            click.echo(f"  [OK] {pkg_name} - {desc}")
        except ImportError:
            click.echo(f"  [MISSING] {pkg_name} - {desc}")
            all_ok = False

    click.echo()
    if all_ok:
        click.echo("[OK] All dependency checks passed")
    else:
        click.echo("[ERROR] Some dependencies missing. Run: pip install -e .")

    logger.info("dependency_check_completed", all_ok=all_ok)


def _check(result: OrderResult) -> OrderResult:
    """Exit with code 2 on a rejected operation."""
    if not result.ok:
        message = _ERROR_MESSAGES.get(result.error, "Rejected") if result.error else "Rejected"
        click.echo(f"[REJECTED] {message}", err=True)
        sys.exit(2)
    return result


def _echo_account(session: MarketSession) -> None:
    snapshot = session.snapshot()
    position = snapshot.position
    decimals = session.settings.quantity_decimals
    price_text = f"${snapshot.latest_price:.2f}" if snapshot.latest_price is not None else "--"
    change_text = f"{snapshot.price_change_pct:+.2f}%" if snapshot.price_change_pct is not None else "--"
    click.echo(f"Price:          {price_text} ({change_text})")
    click.echo(f"Cash balance:   ${snapshot.cash_balance:.2f}")
    click.echo(f"Position:       {position.quantity:.{decimals}f} ({position.direction.title()})")
    click.echo(f"Unrealized P&L: ${snapshot.unrealized_pnl:+.2f}")
    click.echo(f"Realized P&L:   ${snapshot.realized_pnl:+.2f}")
    click.echo(f"Equity:         ${snapshot.equity:.2f}")


# Support `python -m candle_sim.main`
if __name__ == "__main__":
    cli()
