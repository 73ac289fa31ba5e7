"""Property-based tests for the pure pricing, payment and tracking helpers."""

import copy
from datetime import date

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tourdesk.core.exceptions import ValidationError
from tourdesk.schemas.booking import PaxSelection, SeatSelection, TourSelection
from tourdesk.services.analytics_service import months_before, percent_change, week_start
from tourdesk.services.payment_service import from_stripe_amount, to_stripe_amount
from tourdesk.services.pricing_service import (
    grand_totals,
    price_tour_selection,
    price_upsell,
    profit,
    public_pricing_config,
)
from tourdesk.services.tracking_service import hash_ip

# Strategies for generating test data
prices = st.integers(min_value=0, max_value=100_000)
guests = st.integers(min_value=1, max_value=10)
octets = st.integers(min_value=0, max_value=255)
days = st.dates(min_value=date(2000, 1, 1), max_value=date(2100, 12, 31))


@settings(max_examples=50)
@given(retail=prices, net=prices, pax=guests)
def test_flat_total_is_price_times_guests(retail, net, pax):
    config = {"type": "flat_per_person", "retail_price": retail, "net_price": net, "min_pax": 1, "max_pax": 10}

    quote = price_tour_selection(config, TourSelection(pax=PaxSelection(total=pax)))

    assert quote.pax == pax
    assert quote.total_retail == retail * pax
    assert quote.total_net == net * pax


@given(pax=st.integers(min_value=11, max_value=500))
def test_flat_rejects_groups_above_max(pax):
    config = {"type": "flat_per_person", "retail_price": 100, "net_price": 50, "max_pax": 10}

    with pytest.raises(ValidationError):
        price_tour_selection(config, TourSelection(pax=PaxSelection(total=pax)))


@settings(max_examples=50)
@given(
    adult_price=prices,
    child_price=prices,
    adults=st.integers(min_value=1, max_value=6),
    children=st.integers(min_value=0, max_value=4),
)
def test_adult_child_total_sums_lines(adult_price, child_price, adults, children):
    config = {
        "type": "adult_child",
        "adult_retail_price": adult_price,
        "adult_net_price": 0,
        "child_retail_price": child_price,
        "child_net_price": 0,
        "max_pax": 10,
    }

    quote = price_tour_selection(config, TourSelection(pax=PaxSelection(adult=adults, child=children)))

    assert quote.total_retail == adults * adult_price + children * child_price
    assert quote.total_retail == sum(line.total_retail for line in quote.breakdown)
    assert quote.pax == adults + children


@given(capacity=st.integers(min_value=1, max_value=30), qty=st.integers(min_value=0, max_value=40))
def test_seat_quantity_within_capacity(capacity, qty):
    config = {
        "type": "seat_based",
        "seats": [{"seat_type": "vip", "retail_price": 900, "net_price": 600, "capacity": capacity}],
    }
    selection = TourSelection(seat=SeatSelection(type="vip", qty=qty))

    if 1 <= qty <= capacity:
        assert price_tour_selection(config, selection).total_retail == 900 * qty
    else:
        with pytest.raises(ValidationError):
            price_tour_selection(config, selection)


@given(retail=prices, net=prices, quantity=st.integers(min_value=1, max_value=5), pax=guests)
def test_per_person_upsell_scales_with_guests(retail, net, quantity, pax):
    per_person = price_upsell("per_person", retail, net, quantity, pax)
    per_booking = price_upsell("per_booking", retail, net, quantity, pax)

    assert per_person == (retail * quantity * pax, net * quantity * pax)
    assert per_booking == (retail * quantity, net * quantity)


@given(retail=prices, net=prices, pax=guests, upsells=st.lists(st.tuples(prices, prices), max_size=4))
def test_profit_is_retail_minus_net(retail, net, pax, upsells):
    config = {"type": "flat_per_person", "retail_price": retail, "net_price": net}
    quote = price_tour_selection(config, TourSelection(pax=PaxSelection(total=pax)))

    total_retail, total_net = grand_totals(quote, upsells)

    assert total_retail == retail * pax + sum(r for r, _ in upsells)
    assert profit(total_retail, total_net) == total_retail - total_net


@given(
    config=st.recursive(
        st.dictionaries(st.sampled_from(["retail_price", "net_price", "adult_net_price", "currency"]), prices),
        lambda children: st.dictionaries(st.sampled_from(["seats", "tiers"]), st.lists(children, max_size=3)),
        max_leaves=8,
    )
)
def test_public_config_never_exposes_net_prices(config):
    original = copy.deepcopy(config)

    def keys(value):
        if isinstance(value, dict):
            for k, v in value.items():
                yield k
                yield from keys(v)
        elif isinstance(value, list):
            for v in value:
                yield from keys(v)

    public = public_pricing_config(config)

    assert not any("net_price" in k for k in keys(public))
    assert config == original


@given(cents=st.integers(min_value=0, max_value=10_000_000), currency=st.sampled_from(["THB", "USD", "EUR"]))
def test_stripe_amount_in_minor_units(cents, currency):
    amount = cents / 100

    assert to_stripe_amount(amount, currency) == cents
    assert from_stripe_amount(cents, currency) == amount


@given(amount=st.integers(min_value=0, max_value=10_000_000), currency=st.sampled_from(["JPY", "krw", "VND"]))
def test_zero_decimal_currencies_are_not_scaled(amount, currency):
    assert to_stripe_amount(amount, currency) == amount


@given(current=st.integers(min_value=0, max_value=10_000), previous=st.integers(min_value=0, max_value=10_000))
def test_percent_change_sign(current, previous):
    change = percent_change(current, previous)

    if current == previous:
        assert change == 0
    elif current > previous:
        assert change >= 0
    else:
        assert -100 <= change <= 0


@given(a=octets, b=octets, c=octets, last=octets, other=octets)
def test_hash_ip_ignores_last_octet(a, b, c, last, other):
    digest = hash_ip(f"{a}.{b}.{c}.{last}")

    assert digest == hash_ip(f"{a}.{b}.{c}.{other}")
    assert len(digest) == 16
    int(digest, 16)


@given(day=days, months=st.integers(min_value=0, max_value=240))
def test_calendar_helpers(day, months):
    monday = week_start(day)
    assert monday.weekday() == 0
    assert 0 <= (day - monday).days < 7

    start = months_before(day, months)
    assert start.day == 1
    assert (day.year * 12 + day.month) - (start.year * 12 + start.month) == months
