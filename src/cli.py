"""
Command line entry point.

Runs the router on a JSON opportunity catalog and prints the result as
rich tables (or JSON with --output json).
"""

import asyncio
import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from config.settings import get_settings
from src.core.models import LendingPosition, PoolBalance, PoolPosition, RiskTier, YieldOpportunity
from src.data.pipeline import YieldDataPipeline
from src.engine import (
    STRATEGY_PRESETS,
    BorrowSimulator,
    HealthFactorCalculator,
    PositionAggregator,
    YieldRouter,
    format_apy,
    get_preset,
)
from src.logging_setup import setup_logging

logger = logging.getLogger(__name__)

console = Console()


class DecimalParam(click.ParamType):
    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value))
        except InvalidOperation:
            self.fail(f"{value!r} is not a number", param, ctx)


DECIMAL = DecimalParam()


def load_catalog(path: Path) -> List[YieldOpportunity]:
    """Read a JSON list of opportunity dicts (as written by `fetch`)."""
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("opportunities", [])

    opportunities = []
    for item in data:
        try:
            opportunities.append(YieldOpportunity.from_dict(item))
        except (KeyError, ValueError) as e:
            logger.warning(f"Skipping catalog entry {item.get('id', '?')}: {e}")
    return opportunities


def parse_pool_balances(values: Tuple[str, ...]) -> PoolPosition:
    """Parse repeated NAME=USD options (e.g. BTC/USD=3000) into pool balances."""
    balances = []
    for value in values:
        name, sep, amount = value.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected NAME=USD, got {value!r}", param_hint="--pool")
        try:
            usd = Decimal(amount)
        except InvalidOperation:
            raise click.BadParameter(f"{amount!r} is not a number", param_hint="--pool")
        balances.append(PoolBalance(pool_name=name.strip(), shares=usd, value_usd=usd))
    return PoolPosition(balances=balances)


def _opportunity_table(title: str, opportunities: List[YieldOpportunity], with_allocation: bool = False) -> Table:
    table = Table(title=title)
    table.add_column("Name")
    table.add_column("Chain")
    table.add_column("Protocol")
    table.add_column("APY", justify="right")
    table.add_column("TVL", justify="right")
    table.add_column("Risk")
    table.add_column("Score", justify="right")
    if with_allocation:
        table.add_column("Share", justify="right")
        table.add_column("Amount", justify="right")

    for opp in opportunities:
        row = [
            opp.name,
            opp.chain,
            opp.protocol,
            format_apy(opp.apy),
            f"${opp.tvl:,.0f}",
            opp.risk.value,
            f"{opp.score:.1f}",
        ]
        if with_allocation:
            row.append(f"{(opp.allocation_percent or 0) * 100:.2f}%")
            row.append(f"${opp.allocated_amount or 0:,.2f}")
        table.add_row(*row)
    return table


@click.group()
@click.version_option(version="0.1.0", prog_name="yield-router")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(verbose: bool) -> None:
    """Yield router: rank, allocate and check DeFi positions."""
    setup_logging("DEBUG" if verbose else None)


@cli.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--amount", "-a", type=DECIMAL, required=True, help="Deposit amount (USD)")
@click.option(
    "--strategy",
    "-s",
    type=click.Choice(sorted(STRATEGY_PRESETS), case_sensitive=False),
    default="balanced",
    help="Strategy preset",
)
@click.option("--max-positions", "-n", type=int, default=None, help="Maximum positions")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text")
def allocate(catalog: Path, amount: Decimal, strategy: str, max_positions, output: str) -> None:
    """Split a deposit across the best opportunities in CATALOG."""
    router = YieldRouter.from_settings(get_settings())
    config = get_preset(strategy)
    result = router.allocate(load_catalog(catalog), amount, config, max_positions)

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(_opportunity_table(
        f"{router.strategy_name(config)} allocation of ${amount:,.2f}",
        result.opportunities,
        with_allocation=True,
    ))
    console.print(
        f"Weighted APY: [bold]{result.weighted_apy:.2f}%[/bold]  "
        f"Best APY: {result.total_apy:.2f}%  "
        f"Diversification: {result.diversification_score:.0f}/100  "
        f"Risk: {result.risk_score:.2f}"
    )
    console.print(
        f"Unallocated: ${result.unallocated_amount:,.2f} "
        f"({result.unallocated_percent * 100:.2f}%)"
    )


@cli.command()
@click.argument("catalog", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--tolerance",
    "-t",
    type=click.Choice([t.value for t in RiskTier]),
    default=RiskTier.MEDIUM.value,
    help="Risk tolerance used for scoring",
)
def recommend(catalog: Path, tolerance: str) -> None:
    """Show quick start, safe, high-yield and balanced picks."""
    picks = YieldRouter().recommendations(load_catalog(catalog), RiskTier(tolerance))

    quick = picks["quick_start"]
    if quick is None:
        console.print("[yellow]Catalog is empty[/yellow]")
        return

    console.print(f"Quick start: [bold]{quick.name}[/bold] on {quick.chain} at {format_apy(quick.apy)}")
    console.print(_opportunity_table("Safe yield", picks["safe_yield"]))
    console.print(_opportunity_table("High yield", picks["high_yield"]))
    console.print(_opportunity_table("Balanced", picks["balanced"]))


@cli.command()
@click.option("--collateral", type=DECIMAL, required=True, help="Total collateral (USD)")
@click.option("--debt", type=DECIMAL, default=Decimal("0"), help="Total debt (USD)")
@click.option("--threshold", type=DECIMAL, required=True, help="Liquidation threshold (%)")
@click.option("--withdraw", type=DECIMAL, default=None, help="Check a withdrawal amount")
def health(collateral: Decimal, debt: Decimal, threshold: Decimal, withdraw) -> None:
    """Health factor and withdrawal limits of a lending position."""
    settings = get_settings()
    hf = HealthFactorCalculator.health_factor(collateral, debt, threshold)
    limits = HealthFactorCalculator.withdrawal_limits(
        collateral, debt, threshold, settings.safe_health_factor, settings.min_health_factor
    )

    table = Table(title="Lending position")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Health factor", "∞" if hf.is_infinite() else f"{hf:.2f}")
    table.add_row("Status", HealthFactorCalculator.classify(hf).value)
    table.add_row(f"Max withdraw (HF {limits.safe_target})", f"${limits.safe_max:,.2f}")
    table.add_row(f"Max withdraw (HF {limits.absolute_target})", f"${limits.absolute_max:,.2f}")
    console.print(table)

    if withdraw is not None:
        position = LendingPosition(
            total_collateral_usd=collateral,
            total_debt_usd=debt,
            liquidation_threshold=threshold,
            health_factor=hf,
        )
        result = HealthFactorCalculator.validate_withdraw(
            position, withdraw, settings.safe_health_factor, settings.min_health_factor
        )
        color = {"ok": "green", "warning": "yellow", "error": "red"}[result.severity.value]
        console.print(f"[{color}]{result.severity.value.upper()}[/{color}] {result.message or 'Withdrawal is safe'}")


@cli.command()
@click.option("--chain", "-c", "chains", multiple=True, help="Chain slug (repeatable)")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True)
def fetch(chains, output: Path) -> None:
    """Fetch the live catalog and write it as JSON."""
    async def run():
        pipeline = YieldDataPipeline(get_settings())
        try:
            return await pipeline.get_opportunities(list(chains) or None, force_refresh=True)
        finally:
            await pipeline.close()

    result = asyncio.run(run())
    with open(output, "w") as f:
        json.dump([o.to_dict() for o in result.data], f, indent=2)

    console.print(f"Wrote {len(result.data)} opportunities from {result.source} to {output}")
    for error in result.errors:
        console.print(f"[yellow]{error}[/yellow]")


async def _load_user_position(user: str, pools: PoolPosition):
    """Read the lending account and market rates, then aggregate."""
    settings = get_settings()
    pipeline = YieldDataPipeline(settings)
    try:
        lending = await pipeline.get_lending_position(user)
        pool_apys = await pipeline.get_pool_apy_by_symbol()
        borrow_apr = await pipeline.get_borrow_apr()
    finally:
        await pipeline.close()

    position = PositionAggregator.from_settings(settings).aggregate(
        lending, pools, pool_apys, borrow_apr=borrow_apr.data
    )
    return lending, position


@cli.command()
@click.option("--user", "-u", required=True, help="Wallet address")
@click.option("--pool", "pools", multiple=True, help="Pool balance as NAME=USD (repeatable)")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text")
def position(user: str, pools, output: str) -> None:
    """Unified position of USER across the lending market and pools."""
    _, unified = asyncio.run(_load_user_position(user, parse_pool_balances(pools)))

    if output == "json":
        click.echo(json.dumps(unified.to_dict(), indent=2))
        return

    table = Table(title=f"Position of {user}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total value", f"${unified.total_value_usd:,.2f}")
    table.add_row("Earnings", f"${unified.earnings_usd:,.2f} ({unified.earnings_percent:.2f}%)")
    table.add_row("APY", f"{unified.current_apy}%")
    table.add_row("Monthly earnings", f"${unified.monthly_earnings:,.2f}")
    table.add_row("Borrowed", f"${unified.borrowed_usd:,.2f} of ${unified.borrow_capacity_usd:,.2f}")
    table.add_row("Borrow utilization", f"{unified.borrow_utilization:.1f}%")
    hf = unified.health_factor
    table.add_row("Health factor", "∞" if hf.is_infinite() else f"{hf:.2f}")
    table.add_row("Status", unified.health_status)
    console.print(table)


@cli.command("simulate-borrow")
@click.option("--user", "-u", required=True, help="Wallet address")
@click.option("--amount", "-a", type=DECIMAL, required=True, help="Amount to borrow (USD)")
@click.option("--pool", "pools", multiple=True, help="Pool balance as NAME=USD (repeatable)")
@click.option("--apr", type=DECIMAL, default=None, help="Borrow APR override (%)")
@click.option("--output", "-o", type=click.Choice(["text", "json"]), default="text")
def simulate_borrow(user: str, amount: Decimal, pools, apr: Optional[Decimal], output: str) -> None:
    """Before/after earnings and health factor of borrowing AMOUNT."""
    lending, unified = asyncio.run(_load_user_position(user, parse_pool_balances(pools)))
    simulation = BorrowSimulator(unified.borrow_apr).simulate(unified, lending, amount, apr)

    if output == "json":
        click.echo(json.dumps(simulation.to_dict(), indent=2))
        return

    console.print(simulation.headline)
    console.print(
        f"APY {simulation.before.apy:.2f}% -> {simulation.after.apy:.2f}%, "
        f"health factor {simulation.before.health_factor:.2f} -> {simulation.after.health_factor:.2f}"
    )
    for warning in simulation.warnings:
        color = {"info": "cyan", "warning": "yellow", "danger": "red"}[warning.severity.value]
        console.print(f"[{color}]{warning.code}[/{color}] {warning.message}")
    if not simulation.is_allowed:
        console.print(f"[red]Not allowed:[/red] {simulation.validation.message}")
    elif simulation.recommendation:
        console.print(simulation.recommendation)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
