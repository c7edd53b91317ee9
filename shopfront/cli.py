# shopfront/cli.py
import click
from flask import current_app
from flask.cli import with_appcontext

from .schemas import Coupon
from .services import order_status
from .services.coupon_service import evaluate_coupon
from .services.session_service import purge_expired
from .services.totals import quote
from .utils.dates import store_today
from .utils.money import format_vnd


@click.command("purge-sessions")
@with_appcontext
def purge_sessions():
    """Delete expired sessions and their carts."""
    n = purge_expired()
    click.echo(f"Purged {n} expired session(s)")


@click.command("order-transitions")
@with_appcontext
def order_transitions():
    """Print the admin order-status transition table."""
    for status, moves in order_status.TRANSITIONS.items():
        if not moves:
            click.echo(f"{status.value}: (terminal)")
            continue
        for t in moves:
            tracking = " (tracking code required)" if t.requires_tracking else ""
            extra = f"  [{t.side_effect}]" if t.side_effect else ""
            click.echo(f"{status.value} -> {t.target.value}: {t.label}{tracking}{extra}")


@click.command("quote")
@with_appcontext
@click.argument("subtotal", type=int)
@click.option("--percent", type=float, default=None, help="coupon discount in percent")
@click.option("--cap", type=int, default=None, help="maximum discount amount")
@click.option("--min-order", type=int, default=None, help="minimum order amount for the coupon")
@click.option("--fee", type=int, default=None, help="flat shipping fee (defaults to SHIPPING_FEE)")
def quote_cmd(subtotal, percent, cap, min_order, fee):
    """Price an order the way checkout does."""
    fee = current_app.config["SHIPPING_FEE"] if fee is None else fee

    check = None
    if percent is not None:
        today = store_today()
        coupon = Coupon(code="CLI", discount_value=percent, max_discount_amount=cap,
                        min_order_amount=min_order, start_date=today, end_date=today)
        check = evaluate_coupon(coupon, subtotal, today)
        if not check.ok:
            click.echo(f"coupon not applied: {check.message}")
    q = quote(subtotal, fee, check, "CLI")

    click.echo(f"subtotal:  {format_vnd(q.subtotal)}")
    click.echo(f"shipping:  {format_vnd(q.shipping_fee)}")
    click.echo(f"discount: -{format_vnd(q.discount_amount)}")
    click.echo(f"total:     {format_vnd(q.total)}")


def register_cli(app):
    app.cli.add_command(purge_sessions)
    app.cli.add_command(order_transitions)
    app.cli.add_command(quote_cmd)
