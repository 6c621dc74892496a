"""nivesh allocation: print the asset allocation breakdown."""

from __future__ import annotations

import click


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", required=True, help="User whose portfolio to break down.")
@click.option("--account", "account_ids", multiple=True, help="Limit to these account ids (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a text report.")
@click.pass_obj
def allocation(config, snapshot: str, user_id: str, account_ids: tuple[str, ...], as_json: bool) -> None:
    """Show each position's share of the portfolio."""
    from nivesh.core.cli.common import fmt_money, load_service, to_json
    from nivesh.core.utils.async_helpers import run_async_safely

    service = load_service(snapshot, config)
    result = run_async_safely(service.get_asset_allocation(user_id, list(account_ids) or None))

    if as_json:
        click.echo(to_json(result))
        return

    for item in result.allocation:
        label = item.symbol or item.name
        click.echo(f"{label:<12} {item.percentage:6.2f}%  {fmt_money(item.value)}")
    click.echo(f"Total: {fmt_money(result.total_value)}")
