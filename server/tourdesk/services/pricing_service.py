"""Price computation for the three tour pricing engines and for upsells.

All functions here are pure: they take stored pricing configuration plus the
customer's selection and return rounded totals. Invalid selections raise
`ValidationError` so that routers surface them as 400 problems.
"""

import copy
import logging
from typing import Any, Iterable

from ..core.exceptions import ValidationError
from ..models.tour import PricingEngine
from ..models.upsell import UpsellPricingType
from ..schemas.booking import PriceBreakdownItem, TourQuote, TourSelection

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "THB"
DEFAULT_MIN_PAX = 1
DEFAULT_MAX_PAX = 20
DEFAULT_SEAT_CAPACITY = 10


def money(amount: float) -> float:
    """Round to 2 decimals."""
    return round(float(amount), 2)


def default_pricing_config(engine: str) -> dict[str, Any]:
    """Pricing config a freshly created tour starts with."""
    if engine == PricingEngine.FLAT_PER_PERSON:
        return {
            "type": PricingEngine.FLAT_PER_PERSON.value,
            "retail_price": 0,
            "net_price": 0,
            "currency": DEFAULT_CURRENCY,
            "min_pax": 1,
            "max_pax": 10,
        }
    if engine == PricingEngine.ADULT_CHILD:
        return {
            "type": PricingEngine.ADULT_CHILD.value,
            "adult_retail_price": 0,
            "adult_net_price": 0,
            "child_retail_price": 0,
            "child_net_price": 0,
            "currency": DEFAULT_CURRENCY,
            "child_age_max": 11,
            "min_pax": 1,
            "max_pax": 10,
        }
    if engine == PricingEngine.SEAT_BASED:
        return {
            "type": PricingEngine.SEAT_BASED.value,
            "currency": DEFAULT_CURRENCY,
            "seats": [],
        }
    raise ValidationError(detail=f"Unknown pricing engine '{engine}'")


def public_pricing_config(config: dict[str, Any] | None) -> dict[str, Any] | None:
    """Copy of a pricing config without net (cost) prices."""
    if config is None:
        return None

    def _strip(value: Any) -> Any:
        if isinstance(value, dict):
            return {k: _strip(v) for k, v in value.items() if "net_price" not in k}
        if isinstance(value, list):
            return [_strip(v) for v in value]
        return value

    return _strip(copy.deepcopy(config))


def _line(label: str, quantity: int, retail: float, net: float) -> PriceBreakdownItem:
    return PriceBreakdownItem(
        label=label,
        quantity=quantity,
        unit_retail_price=money(retail),
        unit_net_price=money(net),
        total_retail=money(retail * quantity),
        total_net=money(net * quantity),
    )


def _check_pax_bounds(config: dict[str, Any], pax: int) -> None:
    min_pax = config.get("min_pax") or DEFAULT_MIN_PAX
    max_pax = config.get("max_pax") or DEFAULT_MAX_PAX
    if pax < min_pax or pax > max_pax:
        raise ValidationError(
            detail=f"Number of guests must be between {min_pax} and {max_pax}",
            errors={"pax": pax, "min_pax": min_pax, "max_pax": max_pax},
        )


def _quote(
    lines: list[PriceBreakdownItem],
    currency: str,
    adults: int = 0,
    children: int = 0,
    pax: int = 0,
    seat_type: str | None = None,
) -> TourQuote:
    return TourQuote(
        breakdown=lines,
        adults=adults,
        children=children,
        pax=pax,
        seat_type=seat_type,
        total_retail=money(sum(line.total_retail for line in lines)),
        total_net=money(sum(line.total_net for line in lines)),
        currency=currency,
    )


def price_tour_selection(config: dict[str, Any], selection: TourSelection) -> TourQuote:
    """
    Price the tour part of a booking.

    Args:
        config: Stored pricing config of the tour
        selection: Guest counts or seat choice from the customer

    Returns:
        Quote with breakdown lines and rounded totals

    Raises:
        ValidationError: If the selection does not fit the pricing rules
    """
    engine = config.get("type")
    currency = config.get("currency") or DEFAULT_CURRENCY
    pax_selection = selection.pax

    if engine == PricingEngine.FLAT_PER_PERSON:
        if pax_selection is None:
            raise ValidationError(detail="Guest count is required")
        pax = pax_selection.total or (pax_selection.adult + pax_selection.child)
        _check_pax_bounds(config, pax)
        line = _line("Guests", pax, config.get("retail_price", 0), config.get("net_price", 0))
        return _quote([line], currency, adults=pax, pax=pax)

    if engine == PricingEngine.ADULT_CHILD:
        if pax_selection is None:
            raise ValidationError(detail="Guest count is required")
        adults, children = pax_selection.adult, pax_selection.child
        if adults < 1:
            raise ValidationError(detail="At least one adult is required")
        _check_pax_bounds(config, adults + children)
        lines = [_line("Adults", adults, config.get("adult_retail_price", 0), config.get("adult_net_price", 0))]
        if children:
            lines.append(
                _line("Children", children, config.get("child_retail_price", 0), config.get("child_net_price", 0))
            )
        return _quote(lines, currency, adults=adults, children=children, pax=adults + children)

    if engine == PricingEngine.SEAT_BASED:
        if selection.seat is None:
            raise ValidationError(detail="Seat selection is required")
        seat = next(
            (s for s in config.get("seats", []) if s.get("seat_type") == selection.seat.type),
            None,
        )
        if seat is None:
            raise ValidationError(detail=f"Unknown seat type '{selection.seat.type}'")
        capacity = seat.get("capacity") or DEFAULT_SEAT_CAPACITY
        qty = selection.seat.qty
        if qty < 1 or qty > capacity:
            raise ValidationError(
                detail=f"Seat quantity must be between 1 and {capacity}",
                errors={"qty": qty, "capacity": capacity},
            )
        line = _line(seat["seat_type"], qty, seat.get("retail_price", 0), seat.get("net_price", 0))
        return _quote([line], currency, adults=qty, pax=qty, seat_type=seat["seat_type"])

    logger.warning("Unsupported pricing engine", extra={"engine": engine})
    raise ValidationError(detail=f"Tour pricing is not configured (engine '{engine}')")


def upsell_multiplier(pricing_type: str, quantity: int, pax: int) -> int:
    """Number of units charged for an upsell."""
    if pricing_type == UpsellPricingType.PER_PERSON:
        return pax * quantity
    return quantity


def price_upsell(
    pricing_type: str,
    retail_price: float,
    net_price: float,
    quantity: int,
    pax: int,
    max_quantity: int | None = None,
) -> tuple[float, float]:
    """Return (total_retail, total_net) for one selected upsell."""
    if quantity < 1:
        raise ValidationError(detail="Upsell quantity must be at least 1")
    if max_quantity is not None and quantity > max_quantity:
        raise ValidationError(detail=f"Upsell quantity cannot exceed {max_quantity}")

    units = upsell_multiplier(pricing_type, quantity, pax)
    return money(retail_price * units), money(net_price * units)


def grand_totals(tour_quote: TourQuote, upsell_totals: Iterable[tuple[float, float]]) -> tuple[float, float]:
    """Tour totals plus every upsell total, as (retail, net)."""
    retail, net = tour_quote.total_retail, tour_quote.total_net
    for upsell_retail, upsell_net in upsell_totals:
        retail += upsell_retail
        net += upsell_net
    return money(retail), money(net)


def profit(total_retail: float, total_net: float) -> float:
    return money(total_retail - total_net)
