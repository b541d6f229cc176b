"""
Endpoint wrappers and result types built on KrakenAPI.call.

Each wrapper maps typed arguments to form fields, names the result type and
delegates to the client.
"""
from typing import Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from kraken_errors import KrakenRequestBuildError

FormValue = Union[str, int, float, bool]


# ============================================================================
# Result Models
# ============================================================================


class OrderDescription(BaseModel):
    """Order description returned by AddOrder."""

    model_config = ConfigDict(populate_by_name=True)

    pair: Optional[str] = None
    side: Optional[str] = Field(default=None, alias="type")
    order_type: Optional[str] = Field(default=None, alias="ordertype")
    price: Optional[float] = None
    price2: Optional[float] = None
    leverage: Optional[str] = None
    info: Optional[str] = Field(default=None, alias="order")
    close_condition: Optional[str] = Field(default=None, alias="close")


class AddOrderResponse(BaseModel):
    """Response after placing an order."""

    model_config = ConfigDict(populate_by_name=True)

    description: OrderDescription = Field(default_factory=OrderDescription, alias="descr")
    transaction_ids: List[str] = Field(default_factory=list, alias="txid")


class CancelOrderResponse(BaseModel):
    """Response after cancelling an order."""

    count: int
    pending: Optional[bool] = None


class ServerTime(BaseModel):
    """Kraken server time."""

    unixtime: int
    rfc1123: str


# ============================================================================
# Form Values
# ============================================================================


def encode_form_value(value: FormValue) -> str:
    """
    Encode one argument value as a form field.

    Strings pass through, booleans become 'true'/'false', integers are
    written in decimal and floats with 8 fixed decimals.

    Raises:
        KrakenRequestBuildError: For any other type
    """
    # bool before int: bool is an int subclass
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:.8f}"
    raise KrakenRequestBuildError(
        f"Unsupported value type {type(value).__name__} for form field",
        details={'type': type(value).__name__}
    )


def encode_form_args(args: Optional[Mapping[str, FormValue]]) -> Dict[str, str]:
    """Encode a mapping of extra arguments, failing on the first unsupported value."""
    fields = {}
    for key, value in (args or {}).items():
        try:
            fields[key] = encode_form_value(value)
        except KrakenRequestBuildError as e:
            raise KrakenRequestBuildError(
                f"Unsupported value type {type(value).__name__} for key {key}",
                details={'field': key, 'type': type(value).__name__}
            ) from e
    return fields


# ============================================================================
# Endpoints
# ============================================================================


def add_order(api, pair: str, side: str, order_type: str, volume: float,
              args: Optional[Mapping[str, FormValue]] = None) -> AddOrderResponse:
    """
    Add a new order.

    Args:
        api: KrakenAPI instance with trading credentials
        pair: Trading pair (e.g., 'XBTUSD')
        side: 'buy' or 'sell'
        order_type: Order type (market, limit, etc.)
        volume: Order volume
        args: Additional order parameters (e.g. {'price': 37500.0, 'validate': True})

    Returns:
        AddOrderResponse
    """
    data = {
        'pair': pair,
        'volume': encode_form_value(float(volume)),
        'type': side,
        'ordertype': order_type,
    }
    # Extra args win over the named ones
    data.update(encode_form_args(args))
    return api.call('AddOrder', True, data, AddOrderResponse)


def cancel_order(api, txid: str) -> CancelOrderResponse:
    """
    Cancel an open order.

    Args:
        api: KrakenAPI instance with trading credentials
        txid: Transaction ID or user reference of the order(s) to cancel

    Returns:
        CancelOrderResponse with the number of cancelled orders
    """
    if not txid:
        raise KrakenRequestBuildError("txid parameter is required")
    return api.call('CancelOrder', True, {'txid': txid}, CancelOrderResponse)


def get_server_time(api) -> ServerTime:
    """Get the server time (public)."""
    return api.call('Time', False, None, ServerTime)
