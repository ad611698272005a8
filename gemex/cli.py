"""Command-line interface for the Gemini REST client."""

from collections.abc import Awaitable, Callable

import asyncclick as click
from loguru import logger

from .config import Config
from .exchange.client import GeminiClient, GeminiClientError, OrderOption, OrderSide

Action = Callable[[GeminiClient], Awaitable[None]]


async def run_command(config: Config, action: Action) -> int:
    """Run one client action. Returns 0 on success, 1 on error."""
    client = GeminiClient(
        base_url=config.gemini_base_url,
        api_key=config.gemini_api_key,
        api_secret=config.gemini_api_secret,
        timeout=config.gemini_timeout,
    )
    try:
        await action(client)
        return 0
    except GeminiClientError as e:
        logger.error("Request failed: {}", e)
        return 1
    finally:
        await client.close()


def _load_config(private: bool) -> Config:
    config = Config()
    errors = config.validate(require_credentials=private)
    if errors:
        for err in errors:
            logger.error("Config error: {}", err)
        logger.info(
            "Copy .env.example to .env and set GEMINI_API_KEY, GEMINI_API_SECRET. "
            "Get sandbox keys at https://exchange.sandbox.gemini.com/"
        )
        raise SystemExit(1)
    return config


@click.group()
def cli() -> None:
    """gemex - Gemini exchange REST client."""


@cli.command()
@click.argument("pair", required=False)
async def ticker(pair: str | None) -> None:
    """Show bid, ask and last price for PAIR."""
    config = _load_config(private=False)
    pair = pair or config.default_pair

    async def action(client: GeminiClient) -> None:
        t = await client.get_ticker(pair)
        click.echo(f"{pair}: bid={t.bid} ask={t.ask} last={t.last}")

    raise SystemExit(await run_command(config, action))


@cli.command()
@click.argument("pair", required=False)
@click.option("--bids", default=10, show_default=True, help="Bid levels to fetch")
@click.option("--asks", default=10, show_default=True, help="Ask levels to fetch")
async def book(pair: str | None, bids: int, asks: int) -> None:
    """Show the orderbook for PAIR."""
    config = _load_config(private=False)
    pair = pair or config.default_pair

    async def action(client: GeminiClient) -> None:
        orderbook = await client.get_orderbook(pair, bids, asks)
        for level in orderbook.asks[::-1]:
            click.echo(f"ask {level.price:>14} {level.amount:>16}")
        for level in orderbook.bids:
            click.echo(f"bid {level.price:>14} {level.amount:>16}")

    raise SystemExit(await run_command(config, action))


@cli.command()
async def funds() -> None:
    """Show account balances."""
    config = _load_config(private=True)

    async def action(client: GeminiClient) -> None:
        for fund in await client.get_funds():
            click.echo(
                f"{fund.currency}: amount={fund.amount} available={fund.available} "
                f"withdrawable={fund.available_for_withdrawal}"
            )

    raise SystemExit(await run_command(config, action))


@cli.command()
async def orders() -> None:
    """Show active orders."""
    config = _load_config(private=True)

    async def action(client: GeminiClient) -> None:
        active = await client.get_order_status()
        if not active:
            click.echo("No active orders")
        for order in active:
            click.echo(
                f"{order.order_id} {order.side} {order.symbol} "
                f"{order.remaining_amount}/{order.original_amount} @ {order.price}"
            )

    raise SystemExit(await run_command(config, action))


@cli.command("cancel-all")
@click.option(
    "--quiet",
    is_flag=True,
    help="Ignore failures (best effort)",
)
async def cancel_all(quiet: bool) -> None:
    """Cancel all orders placed in this session."""
    config = _load_config(private=True)

    async def action(client: GeminiClient) -> None:
        if quiet:
            await client.cancel_all_quietly()
            return
        result = await client.cancel_all()
        click.echo(
            f"{result.result}: cancelled={len(result.cancelled_orders)} "
            f"rejected={len(result.cancel_rejects)}"
        )

    raise SystemExit(await run_command(config, action))


@cli.command()
@click.argument("currency")
@click.argument("address")
@click.argument("amount", type=float)
async def withdraw(currency: str, address: str, amount: float) -> None:
    """Withdraw AMOUNT of CURRENCY to ADDRESS."""
    config = _load_config(private=True)

    async def action(client: GeminiClient) -> None:
        click.echo(str(await client.withdraw(currency, address, amount)))

    raise SystemExit(await run_command(config, action))


@cli.command()
@click.argument("side", type=click.Choice([s.value for s in OrderSide]))
@click.argument("pair")
@click.argument("amount", type=float)
@click.argument("price", type=float)
@click.option("--client-id", default="", help="Client order id")
@click.option(
    "--option",
    "options",
    multiple=True,
    type=click.Choice([o.value for o in OrderOption]),
    help="Order execution option (repeatable)",
)
async def order(
    side: str,
    pair: str,
    amount: float,
    price: float,
    client_id: str,
    options: tuple[str, ...],
) -> None:
    """Place a limit order."""
    config = _load_config(private=True)

    async def action(client: GeminiClient) -> None:
        placed = await client.place_limit_order(
            side, pair, client_id, amount, price, list(options)
        )
        click.echo(f"Order placed: {placed.order_id} (live={placed.is_live})")

    raise SystemExit(await run_command(config, action))
