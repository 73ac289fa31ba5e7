"""Unit tests for the pricing engines."""

import pytest

from tourdesk.core.exceptions import ValidationError
from tourdesk.schemas.booking import TourSelection
from tourdesk.services.pricing_service import (
    default_pricing_config,
    grand_totals,
    price_tour_selection,
    price_upsell,
    profit,
    public_pricing_config,
    upsell_multiplier,
)

FLAT = {
    "type": "flat_per_person",
    "retail_price": 1500,
    "net_price": 1000,
    "currency": "THB",
    "min_pax": 2,
    "max_pax": 8,
}

ADULT_CHILD = {
    "type": "adult_child",
    "adult_retail_price": 2000,
    "adult_net_price": 1400,
    "child_retail_price": 1200,
    "child_net_price": 800,
    "currency": "THB",
    "min_pax": 1,
    "max_pax": 10,
}

SEATS = {
    "type": "seat_based",
    "currency": "USD",
    "seats": [
        {"seat_type": "Standard", "capacity": 20, "retail_price": 49.99, "net_price": 30},
        {"seat_type": "VIP", "capacity": 4, "retail_price": 120, "net_price": 75.5},
    ],
}


def selection(**kwargs) -> TourSelection:
    return TourSelection.model_validate(kwargs)


def test_flat_per_person_uses_total():
    quote = price_tour_selection(FLAT, selection(pax={"total": 3}))

    assert quote.pax == 3
    assert quote.total_retail == 4500
    assert quote.total_net == 3000
    assert quote.currency == "THB"
    assert len(quote.breakdown) == 1


def test_flat_per_person_falls_back_to_adult_plus_child():
    quote = price_tour_selection(FLAT, selection(pax={"adult": 2, "child": 1}))
    assert quote.pax == 3
    assert quote.total_retail == 4500


@pytest.mark.parametrize("pax", [1, 9])
def test_flat_per_person_enforces_bounds(pax):
    with pytest.raises(ValidationError) as exc_info:
        price_tour_selection(FLAT, selection(pax={"total": pax}))
    assert "between 2 and 8" in exc_info.value.problem_details["detail"]


def test_flat_requires_guest_count():
    with pytest.raises(ValidationError):
        price_tour_selection(FLAT, selection())


def test_adult_child_prices_each_group():
    quote = price_tour_selection(ADULT_CHILD, selection(pax={"adult": 2, "child": 2}))

    assert quote.adults == 2
    assert quote.children == 2
    assert quote.pax == 4
    assert quote.total_retail == 2 * 2000 + 2 * 1200
    assert quote.total_net == 2 * 1400 + 2 * 800
    assert [line.label for line in quote.breakdown] == ["Adults", "Children"]


def test_adult_child_without_children_has_one_line():
    quote = price_tour_selection(ADULT_CHILD, selection(pax={"adult": 1}))
    assert [line.label for line in quote.breakdown] == ["Adults"]


def test_adult_child_requires_an_adult():
    with pytest.raises(ValidationError):
        price_tour_selection(ADULT_CHILD, selection(pax={"adult": 0, "child": 2}))


def test_seat_based_prices_chosen_seat():
    quote = price_tour_selection(SEATS, selection(seat={"type": "VIP", "qty": 3}))

    assert quote.seat_type == "VIP"
    assert quote.pax == 3
    assert quote.total_retail == 360
    assert quote.total_net == 226.5
    assert quote.currency == "USD"


def test_seat_based_rounds_to_cents():
    quote = price_tour_selection(SEATS, selection(seat={"type": "Standard", "qty": 3}))
    assert quote.total_retail == 149.97


@pytest.mark.parametrize("qty", [0, 5])
def test_seat_based_quantity_within_capacity(qty):
    with pytest.raises(ValidationError):
        price_tour_selection(SEATS, selection(seat={"type": "VIP", "qty": qty}))


def test_seat_based_unknown_type():
    with pytest.raises(ValidationError):
        price_tour_selection(SEATS, selection(seat={"type": "Balcony", "qty": 1}))


def test_unknown_engine_is_rejected():
    with pytest.raises(ValidationError):
        price_tour_selection({"type": "auction"}, selection(pax={"total": 1}))


def test_upsell_multiplier():
    assert upsell_multiplier("per_person", quantity=2, pax=3) == 6
    assert upsell_multiplier("per_booking", quantity=2, pax=3) == 2
    assert upsell_multiplier("flat", quantity=1, pax=5) == 1


def test_price_upsell_per_person():
    assert price_upsell("per_person", 200, 120, quantity=1, pax=4) == (800, 480)


def test_price_upsell_respects_max_quantity():
    with pytest.raises(ValidationError):
        price_upsell("per_booking", 500, 300, quantity=3, pax=2, max_quantity=2)


def test_grand_totals_and_profit():
    quote = price_tour_selection(FLAT, selection(pax={"total": 2}))
    retail, net = grand_totals(quote, [(400, 240), (150, 100)])

    assert retail == 3550
    assert net == 2340
    assert profit(retail, net) == 1210


def test_public_pricing_config_strips_net_prices():
    public = public_pricing_config(SEATS)

    assert all("net_price" not in seat for seat in public["seats"])
    assert public["seats"][0]["retail_price"] == 49.99
    # the stored config is untouched
    assert SEATS["seats"][0]["net_price"] == 30

    public_adult_child = public_pricing_config(ADULT_CHILD)
    assert "adult_net_price" not in public_adult_child
    assert "child_net_price" not in public_adult_child
    assert public_pricing_config(None) is None


@pytest.mark.parametrize("engine", ["flat_per_person", "adult_child", "seat_based"])
def test_default_pricing_config_matches_engine(engine):
    assert default_pricing_config(engine)["type"] == engine
