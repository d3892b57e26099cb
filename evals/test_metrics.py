"""
Unit tests for market metrics.

Tests cover:
  1. Core statistics — mean, median, ranges, activity rate guards
  2. Price per sq ft — undefined (None) when area is 0
  3. Days on market — floor of days, clamped at 0
  4. Investment score, rent and ROI heuristics
  5. Threshold ladders and segmentation
  6. MarketSnapshot
"""

from datetime import datetime, timedelta, timezone

import pytest

from house_finder.metrics import (
    ACTIVITY_LEVEL,
    INVENTORY_STATUS,
    INVESTMENT_RATING,
    INVESTMENT_RECOMMENDATION,
    MARKET_STATUS,
    MARKET_TONE,
    MarketSnapshot,
    activity_rate,
    days_on_market,
    estimated_monthly_rent,
    first_match,
    group_by_agent,
    group_by_area,
    investment_score,
    is_recent,
    market_position,
    mean,
    median,
    price_bands,
    price_per_sqft,
    price_volatility,
    roi_estimate,
    type_counts,
)
from house_finder.models import Agent


# ---------------------------------------------------------------------------
# Test 1 — core statistics
# ---------------------------------------------------------------------------

def test_median_examples():
    assert median([100, 300, 200]) == 200
    assert median([100, 300]) == 200
    assert median([]) == 0


def test_mean_and_median_of_five_prices(make_property, now):
    prices = [100_000, 200_000, 300_000, 400_000, 500_000]
    props = [make_property(id=str(p), price=p) for p in prices]

    snapshot = MarketSnapshot.from_properties(props, "Test", now)

    assert mean(prices) == 300_000
    assert snapshot.average_price == 300_000
    assert snapshot.median_price == 300_000
    assert (snapshot.min_price, snapshot.max_price) == (100_000, 500_000)


def test_activity_rate_guards_zero_total():
    assert activity_rate(0, 0) == 0.0
    assert activity_rate(1, 4) == 25.0


def test_price_volatility():
    assert price_volatility([300_000]) == 0.0
    assert price_volatility([100, 300]) == pytest.approx(50.0)


# ---------------------------------------------------------------------------
# Test 2 — price per square foot
# ---------------------------------------------------------------------------

def test_price_per_sqft_undefined_for_zero_area(make_property):
    assert price_per_sqft(make_property(square_feet=0)) is None
    assert price_per_sqft(make_property(price=300_000, square_feet=1_500)) == 200


# ---------------------------------------------------------------------------
# Test 3 — days on market
# ---------------------------------------------------------------------------

def test_days_on_market_floors_and_clamps(make_property, now):
    assert days_on_market(make_property(days_listed=10.9), now) == 10
    assert days_on_market(make_property(days_listed=-3), now) == 0


def test_is_recent_window(make_property, now):
    assert is_recent(make_property(days_listed=7), now)
    assert not is_recent(make_property(days_listed=8), now)


# ---------------------------------------------------------------------------
# Test 4 — investment heuristics
# ---------------------------------------------------------------------------

def test_investment_score_best_case(make_property, now):
    # ppsf 100 (+20), 2500 sq ft (+10), 4 beds (+5), 5 days (+10)
    prop = make_property(price=250_000, square_feet=2_500, bedrooms=4, days_listed=5)
    assert investment_score(prop, now) == 95


def test_investment_score_penalties(make_property, now):
    # ppsf 600 (-15), 1 bed, 120 days (-10)
    prop = make_property(price=600_000, square_feet=1_000, bedrooms=1, days_listed=120)
    assert investment_score(prop, now) == 25


def test_investment_score_skips_ppsf_without_area(make_property, now):
    prop = make_property(square_feet=0, bedrooms=3, days_listed=10)
    assert investment_score(prop, now) == 65


def test_investment_score_mid_band(make_property, now):
    # ppsf 250 (+10), 50 days (no change)
    prop = make_property(price=375_000, square_feet=1_500, bedrooms=2, days_listed=50)
    assert investment_score(prop, now) == 60


def test_investment_score_is_clamped(make_property, now):
    for prop in (
        make_property(price=50_000, square_feet=5_000, bedrooms=6, days_listed=1),
        make_property(price=9_000_000, square_feet=500, bedrooms=0, days_listed=400),
    ):
        assert 0 <= investment_score(prop, now) <= 100


def test_rent_and_roi(make_property):
    prop = make_property(price=300_000, square_feet=1_500)
    assert estimated_monthly_rent(prop) == pytest.approx(3_000)
    assert roi_estimate(prop) == pytest.approx(12.0)
    assert roi_estimate(make_property(price=0)) is None


# ---------------------------------------------------------------------------
# Test 5 — ladders and segmentation
# ---------------------------------------------------------------------------

def test_first_match_takes_the_first_rung():
    assert first_match(ACTIVITY_LEVEL, 25) == "Very High"
    assert first_match(ACTIVITY_LEVEL, 12) == "Moderate"
    assert first_match(ACTIVITY_LEVEL, 0) == "Very Low"
    assert first_match([(lambda v: v > 10, "big")], 1, default="small") == "small"


def test_market_ladders():
    assert first_match(MARKET_TONE, 900_000, 20) == "high-end luxury market with strong activity"
    assert first_match(MARKET_TONE, 900_000, 9) == "mid-market with steady growth"
    assert first_match(MARKET_TONE, 150_000, 9) == "moderately active market with balanced conditions"
    assert first_match(MARKET_STATUS, 25, 10) == "Hot Market - High Demand"
    assert first_match(MARKET_STATUS, 25, 60) == "Active Market - Good Momentum"
    assert first_match(MARKET_STATUS, 0, 90) == "Buyer's Market - High Inventory"
    assert first_match(INVENTORY_STATUS, 5) == "Very low inventory - highly competitive"


def test_score_ladders():
    assert first_match(INVESTMENT_RATING, 80) == "Excellent"
    assert first_match(INVESTMENT_RATING, 55) == "Average"
    assert first_match(INVESTMENT_RECOMMENDATION, 72) == "Buy"
    assert first_match(INVESTMENT_RECOMMENDATION, 10) == "Avoid"


def test_market_position_quartiles():
    prices = [100, 200, 300, 400]
    assert market_position(100, prices) == "Lower quartile"
    assert market_position(200, prices) == "Below median"
    assert market_position(300, prices) == "Above median"
    assert market_position(400, prices) == "Upper quartile"


def test_price_bands(make_property, now):
    props = [make_property(price=p) for p in (150_000, 250_000, 350_000, 1_500_000)]
    bands = {band.label: band for band in price_bands(props, now)}
    assert bands["Under $200K"].count == 1
    assert bands["$200K - $400K"].count == 2
    assert bands["$200K - $400K"].average_price == 300_000
    assert bands["Over $1M"].count == 1
    assert bands["$600K - $800K"].count == 0
    assert sum(b.count for b in bands.values()) == 4


def test_group_by_area_and_type_counts(make_property, now):
    props = [
        make_property(city="Austin", state="TX", price=400_000, square_feet=0),
        make_property(city="Austin", state="TX", price=200_000, property_type="condo", square_feet=0),
        make_property(city="Round Rock", state="TX", price=350_000),
    ]
    areas = group_by_area(props, now)
    assert [(a.city, a.count) for a in areas] == [("Austin", 2), ("Round Rock", 1)]
    assert areas[0].average_price == 300_000
    assert areas[0].average_price_per_sqft is None
    assert type_counts(props) == [("single_family", 2), ("condo", 1)]


def test_group_by_agent(make_property):
    same_line = Agent(name="Pat Lee", phone="555-0100", email="pat@example.com")
    other_phone = Agent(name="Pat Lee", phone="555-0111", email="pat.lee@example.com")
    props = [
        make_property(agent=same_line, price=100_000),
        make_property(agent=Agent(name="Pat Lee", phone="555-0100", email="other@example.com"), price=300_000),
        make_property(agent=other_phone, price=500_000),
    ]
    agents = group_by_agent(props)

    assert [(a.phone, a.count) for a in agents] == [("555-0100", 2), ("555-0111", 1)]
    assert agents[0].email == "pat@example.com"
    assert agents[0].average_price == 200_000
    assert (agents[0].min_price, agents[0].max_price) == (100_000, 300_000)
    assert group_by_agent([]) == []


# ---------------------------------------------------------------------------
# Test 6 — snapshot
# ---------------------------------------------------------------------------

def test_snapshot_counts_recent_and_flags(make_property, now):
    props = [
        make_property(id="new", days_listed=2, is_new_construction=True),
        make_property(id="cut", days_listed=30, price_reduced_amount=5_000),
        make_property(id="old", days_listed=90, square_feet=0),
        make_property(id="older", days_listed=120),
    ]
    snapshot = MarketSnapshot.from_properties(props, "Nashville, TN", now)

    assert snapshot.count == 4
    assert snapshot.recent_count == 1
    assert snapshot.activity_rate == 25.0
    assert snapshot.activity_level == "Very High"
    assert snapshot.new_construction_count == 1
    assert snapshot.price_reduced_count == 1
    assert snapshot.average_days_on_market == pytest.approx(60.5)
    assert snapshot.market_velocity == "Slow market - good for negotiation"
    assert snapshot.now == now


def test_snapshot_of_nothing_is_safe(now):
    snapshot = MarketSnapshot.from_properties([], "Nowhere", now)
    assert snapshot.count == 0
    assert snapshot.activity_rate == 0.0
    assert snapshot.average_price_per_sqft is None
    assert snapshot.market_status == "Stable Market - Steady Activity"


def test_snapshot_now_defaults_to_current_time(make_property):
    snapshot = MarketSnapshot.from_properties([make_property()], "Test")
    assert snapshot.now.tzinfo is not None
    assert abs(datetime.now(timezone.utc) - snapshot.now) < timedelta(minutes=1)
