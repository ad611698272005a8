"""Typed records decoded from Gemini REST responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _decimal(raw: dict[str, Any], key: str) -> float:
    """Parse a decimal-string field; missing fields decode to 0.0."""
    value = raw.get(key)
    if value is None:
        return 0.0
    return float(value)


def _integer(raw: dict[str, Any], key: str) -> int:
    value = raw.get(key)
    if value is None:
        return 0
    return int(value)


def _string(raw: dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{key} must be a string, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def _boolean(raw: dict[str, Any], key: str) -> bool:
    value = raw.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        msg = f"{key} must be a boolean, got {type(value).__name__}"
        raise TypeError(msg)
    return value


def _fmt(value: float) -> str:
    # str() of a float is its shortest round-tripping form
    return str(value)


@dataclass(slots=True)
class Ticker:
    """Best bid/ask and last trade price for a pair."""

    bid: float
    ask: float
    last: float

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> Ticker:
        return cls(
            bid=_decimal(raw, "bid"),
            ask=_decimal(raw, "ask"),
            last=_decimal(raw, "last"),
        )

    def to_gemini(self) -> dict[str, Any]:
        return {"bid": _fmt(self.bid), "ask": _fmt(self.ask), "last": _fmt(self.last)}


@dataclass(slots=True)
class OrderbookEntry:
    """Single price level of an orderbook side."""

    price: float
    amount: float
    timestamp: int

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> OrderbookEntry:
        return cls(
            price=_decimal(raw, "price"),
            amount=_decimal(raw, "amount"),
            timestamp=_integer(raw, "timestamp"),
        )

    def to_gemini(self) -> dict[str, Any]:
        return {
            "price": _fmt(self.price),
            "amount": _fmt(self.amount),
            "timestamp": str(self.timestamp),
        }


@dataclass(slots=True)
class Orderbook:
    """Bids and asks as returned by the book endpoint, best level first."""

    bids: list[OrderbookEntry] = field(default_factory=list)
    asks: list[OrderbookEntry] = field(default_factory=list)

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> Orderbook:
        return cls(
            bids=[OrderbookEntry.from_gemini(b) for b in raw.get("bids") or []],
            asks=[OrderbookEntry.from_gemini(a) for a in raw.get("asks") or []],
        )

    def to_gemini(self) -> dict[str, Any]:
        return {
            "bids": [b.to_gemini() for b in self.bids],
            "asks": [a.to_gemini() for a in self.asks],
        }


@dataclass(slots=True)
class Fund:
    """Balance of one currency in the account."""

    type: str
    currency: str
    amount: float
    available: float
    available_for_withdrawal: float

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> Fund:
        return cls(
            type=_string(raw, "type"),
            currency=_string(raw, "currency"),
            amount=_decimal(raw, "amount"),
            available=_decimal(raw, "available"),
            available_for_withdrawal=_decimal(raw, "availableForWithdrawal"),
        )

    def to_gemini(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "currency": self.currency,
            "amount": _fmt(self.amount),
            "available": _fmt(self.available),
            "availableForWithdrawal": _fmt(self.available_for_withdrawal),
        }


@dataclass(slots=True)
class Order:
    """Order as returned by order placement and order status."""

    order_id: str
    client_order_id: str
    symbol: str
    price: float
    avg_execution_price: float
    side: str
    type: str
    timestamp: int
    timestampms: int
    is_live: bool
    is_cancelled: bool
    executed_amount: float
    remaining_amount: float
    original_amount: float

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> Order:
        return cls(
            order_id=_string(raw, "order_id"),
            client_order_id=_string(raw, "client_order_id"),
            symbol=_string(raw, "symbol"),
            price=_decimal(raw, "price"),
            avg_execution_price=_decimal(raw, "avg_execution_price"),
            side=_string(raw, "side"),
            type=_string(raw, "type"),
            timestamp=_integer(raw, "timestamp"),
            timestampms=_integer(raw, "timestampms"),
            is_live=_boolean(raw, "is_live"),
            is_cancelled=_boolean(raw, "is_cancelled"),
            executed_amount=_decimal(raw, "executed_amount"),
            remaining_amount=_decimal(raw, "remaining_amount"),
            original_amount=_decimal(raw, "original_amount"),
        )

    def to_gemini(self) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "client_order_id": self.client_order_id,
            "symbol": self.symbol,
            "price": _fmt(self.price),
            "avg_execution_price": _fmt(self.avg_execution_price),
            "side": self.side,
            "type": self.type,
            "timestamp": str(self.timestamp),
            "timestampms": self.timestampms,
            "is_live": self.is_live,
            "is_cancelled": self.is_cancelled,
            "executed_amount": _fmt(self.executed_amount),
            "remaining_amount": _fmt(self.remaining_amount),
            "original_amount": _fmt(self.original_amount),
        }


@dataclass(slots=True)
class WithdrawResponse:
    """Result of a withdrawal request."""

    destination: str
    amount: float
    tx_hash: str

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> WithdrawResponse:
        return cls(
            destination=_string(raw, "destination"),
            amount=_decimal(raw, "amount"),
            tx_hash=_string(raw, "txHash"),
        )

    def __str__(self) -> str:
        return f"Withdrew {self.amount:.8f} to {self.destination}, txid={self.tx_hash}"


@dataclass(slots=True)
class CancelResult:
    """Outcome of cancelling every order placed in the session."""

    result: str
    cancelled_orders: list[str] = field(default_factory=list)
    cancel_rejects: list[str] = field(default_factory=list)

    @classmethod
    def from_gemini(cls, raw: dict[str, Any]) -> CancelResult:
        details = raw.get("details") or {}
        return cls(
            result=_string(raw, "result"),
            cancelled_orders=[str(o) for o in details.get("cancelledOrders") or []],
            cancel_rejects=[str(o) for o in details.get("cancelRejects") or []],
        )
