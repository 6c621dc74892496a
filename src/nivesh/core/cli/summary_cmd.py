"""nivesh summary: print a portfolio summary."""

from __future__ import annotations

import click


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", required=True, help="User whose portfolio to summarize.")
@click.option("--account", "account_ids", multiple=True, help="Limit to these account ids (repeatable).")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a text report.")
@click.pass_obj
def summary(config, snapshot: str, user_id: str, account_ids: tuple[str, ...], as_json: bool) -> None:
    """Summarize holdings, cash, and returns from a snapshot file."""
    from nivesh.core.cli.common import fmt_money, fmt_percent, load_service, to_json
    from nivesh.core.utils.async_helpers import run_async_safely

    service = load_service(snapshot, config)
    result = run_async_safely(service.get_portfolio_summary(user_id, list(account_ids) or None))

    if as_json:
        click.echo(to_json(result))
        return

    ccy = result.currency_code
    click.echo(f"Portfolio value:  {fmt_money(result.total_portfolio_value, ccy)}")
    click.echo(f"  Holdings:       {fmt_money(result.total_holdings_value, ccy)}")
    click.echo(f"  Cash:           {fmt_money(result.total_cash_value, ccy)}")
    click.echo(f"Cost basis:       {fmt_money(result.total_cost_basis, ccy)}")
    click.echo(f"Net invested:     {fmt_money(result.total_net_invested, ccy)}")
    click.echo(
        f"Gain/loss:        {fmt_money(result.total_gain_loss, ccy)} ({fmt_percent(result.total_gain_loss_percent)})"
    )
    click.echo(f"TWR:              {fmt_percent(result.time_weighted_return)}")
    click.echo(f"CAGR:             {fmt_percent(result.cagr)}")

    for group in result.holdings_by_account:
        click.echo(f"\n{group.account_name} [{group.currency_code}]")
        click.echo(f"  cash {fmt_money(group.cash_balance)}  net invested {fmt_money(group.net_invested)}")
        for h in group.holdings:
            click.echo(
                f"  {h.symbol:<10} {h.quantity:>12} @ {fmt_money(h.current_price):>12}"
                f"  {fmt_money(h.market_value):>14}  {fmt_percent(h.gain_loss_percent)}"
            )
