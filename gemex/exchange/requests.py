"""Payloads for signed Gemini requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeAlias

ORDER_TYPE_EXCHANGE_LIMIT = "exchange limit"


@dataclass(slots=True, kw_only=True)
class BaseRequest:
    """Payload carrying only the route and nonce."""

    request: str
    nonce: int = 0

    @property
    def route(self) -> str:
        return self.request

    def payload(self) -> dict[str, Any]:
        return {"request": self.request, "nonce": self.nonce}


@dataclass(slots=True, kw_only=True)
class WithdrawRequest(BaseRequest):
    """Crypto withdrawal to an external address."""

    address: str
    amount: str

    def payload(self) -> dict[str, Any]:
        return {
            "request": self.request,
            "nonce": self.nonce,
            "address": self.address,
            "amount": self.amount,
        }


@dataclass(slots=True, kw_only=True)
class OrderPlaceRequest(BaseRequest):
    """New limit order.

    ``amount`` and ``price`` are preformatted decimal strings.
    """

    symbol: str
    amount: str
    price: str
    side: str
    client_order_id: str
    type: str = ORDER_TYPE_EXCHANGE_LIMIT
    options: list[str] = field(default_factory=list)

    def payload(self) -> dict[str, Any]:
        return {
            "request": self.request,
            "nonce": self.nonce,
            "symbol": self.symbol,
            "amount": self.amount,
            "price": self.price,
            "side": self.side,
            "type": self.type,
            "client_order_id": self.client_order_id,
            "options": list(self.options),
        }


SignedRequest: TypeAlias = BaseRequest | WithdrawRequest | OrderPlaceRequest
