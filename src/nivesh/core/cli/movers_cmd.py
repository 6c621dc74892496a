"""nivesh movers: print the day's biggest movers."""

from __future__ import annotations

import click


@click.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", required=True, help="User whose positions to scan.")
@click.option("--limit", type=int, default=None, help="Maximum number of movers (default: movers.limit).")
@click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of a text report.")
@click.pass_obj
def movers(config, snapshot: str, user_id: str, limit: int | None, as_json: bool) -> None:
    """Rank held securities by their latest daily change."""
    from nivesh.core.cli.common import fmt_money, fmt_percent, load_service, to_json
    from nivesh.core.utils.async_helpers import run_async_safely

    service = load_service(snapshot, config)
    result = run_async_safely(service.get_top_movers(user_id, limit))

    if as_json:
        click.echo(to_json(result))
        return

    if not result:
        click.echo("No movers.")
        return
    for m in result:
        click.echo(
            f"{m.symbol:<10} {fmt_money(m.current_price, m.currency_code):>16}  "
            f"{fmt_percent(m.daily_change_percent):>8}  value {fmt_money(m.market_value)}"
        )
