"""CLI 入口模块 - Structured Trade 命令行接口。"""

import sys
import time

import click

from structured_trade import __version__
from structured_trade.config import FeedKind, Settings, get_settings
from structured_trade.data.binance import BinancePriceSource
from structured_trade.data.feed import PriceSource, RandomWalkPriceSource
from structured_trade.errors import InvalidPriceError, PriceFeedError
from structured_trade.exec.orders import execute_order, preview_order
from structured_trade.exec.position import PositionManager
from structured_trade.risk.rules import MAX_STAKE, MIN_STAKE, StakeValidator
from structured_trade.types import Direction, LiveValuation, OrderPreview
from structured_trade.utils.logging import get_logger, setup_logging

_DIRECTION_CHOICE = click.Choice([d.value for d in Direction], case_sensitive=False)


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="显示版本号")
@click.pass_context
def cli(ctx: click.Context, version: bool) -> None:
    """Structured Trade - 限时方向性结构化交易模拟器。

    选择方向、难度和本金，计算目标价、收益倍数与胜率，并实时跟踪持仓盈亏。
    """
    if version:
        click.echo(f"structured-trade version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.option("--direction", "-d", type=_DIRECTION_CHOICE, default="long", help="方向")
@click.option("--risk", "-r", type=click.IntRange(0, 100), default=None, help="难度 0-100")
@click.option("--stake", "-s", type=float, default=None, help="本金")
@click.option("--price", "-p", type=float, default=None, help="当前价格（默认使用配置的起始价格）")
def quote(direction: str, risk: int | None, stake: float | None, price: float | None) -> None:
    """预览合约报价，不开仓。"""
    setup_logging()
    logger = get_logger("structured_trade.main")
    settings = get_settings()
    try:
        preview = preview_order(
            StakeValidator(settings),
            direction=Direction(direction.lower()),
            risk_level=settings.default_risk_level if risk is None else risk,
            stake=settings.default_stake if stake is None else stake,
            current_price=settings.initial_price if price is None else price,
        )
    except InvalidPriceError as e:
        logger.error("quote_failed", error=str(e))
        click.echo(f"[ERROR] {e}")
        sys.exit(1)
    _echo_preview(preview, settings)


@cli.command()
@click.option("--direction", "-d", type=_DIRECTION_CHOICE, default="long", help="方向")
@click.option("--risk", "-r", type=click.IntRange(0, 100), default=None, help="难度 0-100")
@click.option("--stake", "-s", type=float, default=None, help="本金")
@click.option("--ticks", "-n", type=click.IntRange(min=1), default=10, help="价格跳动次数")
@click.option(
    "--interval-sec",
    "-i",
    type=click.FloatRange(min=0.0),
    default=None,
    help="跳动间隔（秒），默认使用配置",
)
@click.option("--seed", type=int, default=None, help="随机游走种子")
@click.option(
    "--feed",
    type=click.Choice([f.value for f in FeedKind]),
    default=None,
    help="价格源，默认使用配置",
)
def simulate(
    direction: str,
    risk: int | None,
    stake: float | None,
    ticks: int,
    interval_sec: float | None,
    seed: int | None,
    feed: str | None,
) -> None:
    """开仓并跟踪实时盈亏，结束后手动平仓。

    价格每跳动一次重新估值；达到目标价不会自动结算。
    使用 Ctrl+C 提前平仓。
    """
    setup_logging()
    logger = get_logger("structured_trade.main")
    settings = get_settings()

    feed_kind = FeedKind(feed) if feed is not None else settings.feed
    interval = settings.tick_interval_sec if interval_sec is None else interval_sec
    try:
        source = _build_price_source(settings, feed_kind, seed)
    except PriceFeedError as e:
        logger.error("price_feed_unavailable", feed=feed_kind.value, error=str(e))
        click.echo(f"[ERROR] Price feed unavailable: {e}")
        sys.exit(1)

    validator = StakeValidator(settings)
    manager = PositionManager(validator, contract_window_hours=settings.contract_window_hours)
    side = Direction(direction.lower())
    risk_level = settings.default_risk_level if risk is None else risk
    amount = settings.default_stake if stake is None else stake

    logger.info(
        "starting_simulation",
        feed=feed_kind.value,
        direction=side.value,
        risk_level=risk_level,
        stake=amount,
        ticks=ticks,
    )

    preview = preview_order(
        validator,
        direction=side,
        risk_level=risk_level,
        stake=amount,
        current_price=source.current_price,
    )
    _echo_preview(preview, settings)

    result = execute_order(
        manager,
        validator,
        direction=side,
        risk_level=risk_level,
        stake=amount,
        current_price=source.current_price,
    )
    if not result.ok or result.position is None:
        click.echo(f"[REJECTED] {result.message}")
        sys.exit(1)

    position = result.position
    click.echo(
        f"[OPEN] {position.direction.value.upper()} @ {_fmt_money(position.entry_price)}"
        f" -> target {_fmt_money(position.strike_price)}"
        f" (expires {position.expires_at:%b %d, %H:%M} UTC)"
    )

    try:
        for i in range(1, ticks + 1):
            price = source.tick()
            valuation = manager.on_price_tick(price)
            if valuation is not None:
                click.echo(_format_tick(i, price, valuation, position.multiplier))
            if interval > 0 and i < ticks:
                time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("simulation_interrupted", message="User closed early")

    summary = manager.close()
    click.echo(
        f"[CLOSED] PnL {_fmt_signed_money(summary['pnl'])}"
        f" ({summary['pnl_percent']:+.2f}%)"
        f" at {summary['current_multiplier']:.2f}x"
    )


@cli.command()
def status() -> None:
    """显示配置摘要。"""
    setup_logging()
    settings = get_settings()

    click.echo("=" * 50)
    click.echo("Structured Trade - Status")
    click.echo("=" * 50)
    click.echo()

    click.echo("[Market]")
    click.echo(f"   Symbol: {settings.symbol}")
    click.echo(f"   Feed: {settings.feed.value}")
    click.echo(f"   Start price: {_fmt_money(settings.initial_price)}")
    click.echo(f"   Tick interval: {settings.tick_interval_sec}s")
    if settings.is_live_feed:
        click.echo(f"   Binance Testnet: {'Yes' if settings.binance_testnet else 'No'}")
    click.echo()

    click.echo("[Orders]")
    click.echo(f"   Available balance: {_fmt_money(settings.available_balance)}")
    click.echo(f"   Stake range: ${MIN_STAKE} - ${MAX_STAKE:,}")
    click.echo(f"   Default risk level: {settings.default_risk_level}")
    click.echo(f"   Contract window: {settings.contract_window_hours} hours")
    click.echo()

    click.echo("[Logging]")
    click.echo(f"   Log level: {settings.log_level}")
    click.echo(f"   Log format: {settings.log_format.value}")
    click.echo()

    if settings.is_live_feed:
        missing = settings.validate_for_live_feed()
        if missing:
            click.echo("[ERROR] Live feed configuration incomplete, missing:")
            for key in missing:
                click.echo(f"   - {key}")
        else:
            click.echo("[OK] Live feed configuration complete")
    else:
        click.echo("[INFO] Simulated feed, paper trading only")

    click.echo()
    click.echo("=" * 50)


def _build_price_source(settings: Settings, feed: FeedKind, seed: int | None) -> PriceSource:
    if feed == FeedKind.BINANCE:
        return BinancePriceSource(settings)
    return RandomWalkPriceSource.from_settings(settings, seed=seed)


def _echo_preview(preview: OrderPreview, settings: Settings) -> None:
    contract = preview.contract
    side = contract.direction.value.upper()
    sign = "+" if contract.direction is Direction.LONG else "-"
    click.echo(f"[QUOTE] {side} {settings.symbol} @ {_fmt_money(contract.current_price)}")
    click.echo(
        f"   Target price: {_fmt_money(contract.strike_price)}"
        f" ({sign}{contract.price_gap_pct * 100:.2f}%)"
    )
    click.echo(f"   Target ROI: +{contract.target_roi * 100:.0f}% ({contract.multiplier:.2f}x)")
    click.echo(f"   Win probability: {contract.win_probability:.1f}% ({preview.win_chance})")
    click.echo(f"   Stake: {_fmt_money(preview.stake)}")
    click.echo(f"   Potential payout: {_fmt_money(preview.potential_payout)}")
    if not preview.is_valid:
        click.echo(f"   [ERROR] {preview.stake_check.message}")


def _format_tick(index: int, price: float, valuation: LiveValuation, multiplier: float) -> str:
    marker = " [TARGET]" if valuation.target_reached else ""
    return (
        f"[TICK {index}] {_fmt_money(price)}"
        f"  PnL {_fmt_signed_money(valuation.pnl)} ({valuation.pnl_percent:+.2f}%)"
        f"  {valuation.current_multiplier:.2f}x / {multiplier:.2f}x"
        f"  progress {valuation.progress:.0f}%{marker}"
    )


def _fmt_money(value: float) -> str:
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def _fmt_signed_money(value: float) -> str:
    return _fmt_money(value) if value < 0 else f"+{_fmt_money(value)}"


# 支持 python -m structured_trade.main 调用
if __name__ == "__main__":
    cli()
