"""Gemini REST API client for market data, balances, orders and withdrawals."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import threading
import time
from enum import StrEnum
from typing import Any, Callable, Self, TYPE_CHECKING, TypeVar

import httpx
from loguru import logger

from gemex.data.models import (
    CancelResult,
    Fund,
    Order,
    Orderbook,
    Ticker,
    WithdrawResponse,
)
from gemex.exchange.requests import (
    BaseRequest,
    OrderPlaceRequest,
    SignedRequest,
    WithdrawRequest,
)

if TYPE_CHECKING:
    import sys
    from types import TracebackType

    from loguru import Logger

T = TypeVar("T")

SANDBOX_URL = "https://api.sandbox.gemini.com"
PRODUCTION_URL = "https://api.gemini.com"

# Decimal places used when formatting a limit price, per pair
PRICE_PRECISION: dict[str, int] = {
    "btcusd": 2,
    "ethusd": 2,
    "ethbtc": 5,
}
AMOUNT_PRECISION = 8


class OrderSide(StrEnum):
    BUY = "buy"
    SELL = "sell"


class OrderOption(StrEnum):
    """Execution options accepted by the new order endpoint."""

    MAKER_OR_CANCEL = "maker-or-cancel"
    IMMEDIATE_OR_CANCEL = "immediate-or-cancel"
    FILL_OR_KILL = "fill-or-kill"
    AUCTION_ONLY = "auction-only"
    INDICATION_OF_INTEREST = "indication-of-interest"


class GeminiClientError(Exception):
    """Raised when a Gemini request cannot be completed."""

    def __init__(self, message: str, response: httpx.Response | None = None):
        super().__init__(message)
        self.response = response


class GeminiAPIError(GeminiClientError):
    """Error body returned by Gemini with an HTTP status >= 400."""

    def __init__(
        self,
        result: str,
        reason: str,
        message: str,
        status_code: int,
        response: httpx.Response | None = None,
    ):
        self.result = result
        self.reason = reason
        self.message = message
        self.status_code = status_code
        super().__init__(f"{reason} - {message}", response)

    @classmethod
    def from_response(cls, response: httpx.Response) -> GeminiAPIError:
        body = response.json()
        if not isinstance(body, dict):
            body = {}
        return cls(
            result=body.get("result", ""),
            reason=body.get("reason", ""),
            message=body.get("message", ""),
            status_code=response.status_code,
            response=response,
        )


class GeminiDecodeError(GeminiClientError):
    """Response body is not JSON or does not have the expected shape."""


class UnsupportedPairError(GeminiClientError, ValueError):
    """Pair has no known price precision for order placement."""


def format_amount(amount: float) -> str:
    return f"{amount:.{AMOUNT_PRECISION}f}"


def format_price(pair: str, price: float) -> str:
    """Format a limit price with the precision the pair trades at."""
    decimals = PRICE_PRECISION.get(pair.lower())
    if decimals is None:
        msg = f"Unsupported pair for placing orders: {pair}"
        raise UnsupportedPairError(msg)
    return f"{price:.{decimals}f}"


def encode_payload(payload: dict[str, Any]) -> str:
    """Compact JSON of the payload, base64 encoded."""
    data = json.dumps(payload, separators=(",", ":"))
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def sign_payload(encoded_payload: str, api_secret: str) -> str:
    """HMAC-SHA384 hex digest of the base64 payload."""
    return hmac.new(
        api_secret.encode("utf-8"),
        encoded_payload.encode("utf-8"),
        hashlib.sha384,
    ).hexdigest()


class GeminiClient:
    """Async client for the Gemini REST API (production or sandbox).

    Signed calls carry a nonce that starts at the construction time in
    nanoseconds and grows by one per call. Incrementing it is guarded by a
    lock, so one client may be shared between tasks and threads.
    """

    def __init__(
        self,
        base_url: str = SANDBOX_URL,
        api_key: str = "",
        api_secret: str = "",
        log: Logger | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout
        self.log = log if log is not None else logger.bind(name="gemini api")
        self._nonce = time.time_ns()
        self._nonce_lock = threading.Lock()
        self._client: httpx.AsyncClient | None = None

    @property
    def nonce(self) -> int:
        """Nonce the next signed request will carry."""
        with self._nonce_lock:
            return self._nonce

    def _next_nonce(self) -> int:
        with self._nonce_lock:
            nonce = self._nonce
            self._nonce += 1
        return nonce

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={
                    "Content-Type": "text/plain",
                    "Cache-Control": "no-cache",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        await self._get_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: sys.exc_info  # noqa: PYI036
        | tuple[type[BaseException], BaseException, TracebackType]
        | None,
    ) -> None:
        await self.close()

    def _sign(self, request: SignedRequest) -> dict[str, str]:
        """Build the auth headers for a payload whose nonce is already set."""
        payload = request.payload()
        self.log.debug("Payload: {}", json.dumps(payload, separators=(",", ":")))
        encoded = encode_payload(payload)
        return {
            "X-GEMINI-APIKEY": self.api_key,
            "X-GEMINI-PAYLOAD": encoded,
            "X-GEMINI-SIGNATURE": sign_payload(encoded, self.api_secret),
        }

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        client = await self._get_client()
        try:
            if method.upper() == "GET":
                return await client.get(url, params=params)
            return await client.post(url, headers=headers)
        except httpx.TimeoutException as e:
            self.log.error("Gemini API request to {} timed out: {}", path, e)
            msg = f"Request timed out: {e}"
            raise GeminiClientError(msg) from e
        except httpx.RequestError as e:
            self.log.error("Gemini API request to {} failed: {}", path, e)
            raise GeminiClientError(str(e)) from e

    def _parse(self, response: httpx.Response, path: str) -> Any:
        """Decode a JSON body, raising the structured error for statuses >= 400."""
        try:
            if response.status_code >= 400:
                err = GeminiAPIError.from_response(response)
                self.log.error(
                    "Gemini API error on {} ({}): {}", path, err.status_code, err
                )
                raise err
            return response.json()
        except ValueError as e:
            self.log.error("Error decoding json response from {}: {}", path, e)
            msg = f"Invalid JSON from {path} (status {response.status_code})"
            raise GeminiDecodeError(msg, response) from e

    def _decode(self, data: Any, decoder: Callable[[Any], T], what: str) -> T:
        try:
            return decoder(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            self.log.error("Failed to decode {} from response: {}", what, data)
            msg = f"Failed to decode {what}: {e}"
            raise GeminiDecodeError(msg) from e

    async def _request(
        self, path: str, params: dict[str, Any] | None = None
    ) -> Any:
        """Execute an unsigned GET request."""
        response = await self._send("GET", path, params=params)
        return self._parse(response, path)

    async def _auth_request(self, request: SignedRequest) -> Any:
        """Sign the payload with a fresh nonce and POST it to its route."""
        request.nonce = self._next_nonce()
        headers = self._sign(request)
        response = await self._send("POST", request.route, headers=headers)
        return self._parse(response, request.route)

    # --- Public (unsigned) endpoints ---

    async def get_ticker(self, pair: str) -> Ticker:
        """Get best bid, ask and last trade price for a pair."""
        data = await self._request(f"/v1/pubticker/{pair}")
        return self._decode(data, Ticker.from_gemini, "ticker")

    async def get_orderbook(
        self, pair: str, bid_limit: int = 50, ask_limit: int = 50
    ) -> Orderbook:
        """Get the current orderbook, limited to the given depth per side."""
        params = {"limit_bids": bid_limit, "limit_asks": ask_limit}
        data = await self._request(f"/v1/book/{pair}", params)
        return self._decode(data, Orderbook.from_gemini, "orderbook")

    # --- Private (signed) endpoints ---

    async def get_funds(self) -> list[Fund]:
        """Get available balances per currency."""
        data = await self._auth_request(BaseRequest(request="/v1/balances"))
        return self._decode(
            data, lambda d: [Fund.from_gemini(f) for f in d], "funds"
        )

    async def get_order_status(self) -> list[Order]:
        """Get all active orders."""
        data = await self._auth_request(BaseRequest(request="/v1/orders"))
        return self._decode(
            data, lambda d: [Order.from_gemini(o) for o in d], "order status"
        )

    async def cancel_all(self) -> CancelResult:
        """Cancel every order opened by this session."""
        data = await self._auth_request(
            BaseRequest(request="/v1/order/cancel/session")
        )
        result = self._decode(data, CancelResult.from_gemini, "cancel result")
        self.log.info(
            "Cancelled {} orders ({} rejected)",
            len(result.cancelled_orders),
            len(result.cancel_rejects),
        )
        return result

    async def cancel_all_quietly(self) -> bool:
        """Best-effort cancel_all: failures are logged, never raised."""
        try:
            await self.cancel_all()
            return True
        except GeminiClientError as e:
            self.log.warning("Cancel all failed: {}", e)
            return False

    async def withdraw(
        self, currency: str, address: str, amount: float
    ) -> WithdrawResponse:
        """Withdraw crypto funds to an external address."""
        request = WithdrawRequest(
            request=f"/v1/withdraw/{currency}",
            address=address,
            amount=format_amount(amount),
        )
        self.log.info("Withdrawing {} {} to {}", request.amount, currency, address)
        data = await self._auth_request(request)
        return self._decode(data, WithdrawResponse.from_gemini, "withdrawal")

    async def place_limit_order(
        self,
        side: OrderSide | str,
        pair: str,
        client_order_id: str,
        amount: float,
        price: float,
        options: list[OrderOption | str] | None = None,
    ) -> Order:
        """Place an exchange limit order.

        Args:
            side: buy or sell
            pair: Trading pair; only btcusd, ethusd and ethbtc are supported
            client_order_id: Caller-chosen id echoed back on the order
            amount: Base currency quantity
            price: Limit price in quote currency
            options: Execution options such as immediate-or-cancel
        """
        symbol = pair.lower()
        try:
            price_str = format_price(symbol, price)
        except UnsupportedPairError as e:
            self.log.error("Rejected order for {}: {}", pair, e)
            raise
        request = OrderPlaceRequest(
            request="/v1/order/new",
            symbol=symbol,
            amount=format_amount(amount),
            price=price_str,
            side=str(side),
            client_order_id=client_order_id,
            options=[str(o) for o in options or []],
        )
        self.log.info(
            "Placing limit order: {} {} {} @ {}",
            request.side,
            request.amount,
            symbol,
            request.price,
        )
        data = await self._auth_request(request)
        order = self._decode(data, Order.from_gemini, "order")
        self.log.info("Order response: {}", order)
        return order
