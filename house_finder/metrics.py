"""
Market metrics — shared statistics for every report
===================================================
Pure functions over normalized listings. Anything day-based takes an
explicit "now"; MarketSnapshot captures it once per report so every sheet
agrees on the same numbers.

Classifications are threshold ladders: ordered (predicate, label) tables,
most restrictive first, evaluated by first_match(). The thresholds are
design constants, not runtime settings.

Price per square foot is undefined when the area is 0. Functions return
None for it and the report layer prints "N/A".
"""

import math
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

from house_finder.models import Property

NOT_AVAILABLE = "N/A"
RECENT_DAYS = 7
_SECONDS_PER_DAY = 86_400

Ladder = Sequence[tuple[Callable[..., bool], Any]]


def first_match(ladder: Ladder, *args, default: Any = None) -> Any:
    """Label of the first rung whose predicate accepts args."""
    for predicate, label in ladder:
        if predicate(*args):
            return label
    return default


# ---------------------------------------------------------------------------
# Core statistics
# ---------------------------------------------------------------------------

def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def median(values: Iterable[float]) -> float:
    """Middle value, or the average of the two middle values."""
    ordered = sorted(values)
    if not ordered:
        return 0.0
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def price_range(properties: Sequence[Property]) -> tuple[int, int]:
    prices = [p.price for p in properties]
    return (min(prices), max(prices)) if prices else (0, 0)


def price_per_sqft(prop: Property) -> Optional[float]:
    if prop.square_feet <= 0:
        return None
    return prop.price / prop.square_feet


def days_on_market(prop: Property, now: Optional[datetime] = None) -> int:
    """Whole days since listing; future list dates count as 0."""
    now = now or datetime.now(timezone.utc)
    elapsed = (now - prop.list_date).total_seconds()
    return max(0, math.floor(elapsed / _SECONDS_PER_DAY))


def is_recent(prop: Property, now: datetime, window_days: int = RECENT_DAYS) -> bool:
    return prop.list_date >= now - timedelta(days=window_days)


def recent_count(properties: Sequence[Property], now: datetime, window_days: int = RECENT_DAYS) -> int:
    return sum(1 for p in properties if is_recent(p, now, window_days))


def activity_rate(recent: int, total: int) -> float:
    """Share of recent listings, in percent."""
    if total <= 0:
        return 0.0
    return recent / total * 100


def price_volatility(prices: Sequence[float]) -> float:
    """Coefficient of variation (population standard deviation / mean), in percent."""
    prices = [p for p in prices if p > 0]
    if len(prices) < 2:
        return 0.0
    avg = mean(prices)
    variance = sum((p - avg) ** 2 for p in prices) / len(prices)
    return math.sqrt(variance) / avg * 100


# ---------------------------------------------------------------------------
# Per-property investment heuristics
# ---------------------------------------------------------------------------

_PPSF_SCORE: Ladder = [
    (lambda v: v < 200, 20),
    (lambda v: v < 300, 10),
    (lambda v: v > 500, -15),
]

_DOM_SCORE: Ladder = [
    (lambda d: d < 30, 10),
    (lambda d: d > 90, -10),
]


def investment_score(prop: Property, now: Optional[datetime] = None) -> int:
    """0-100 heuristic from price per sq ft, size, bedrooms and listing age."""
    score = 50
    ppsf = price_per_sqft(prop)
    if ppsf is not None:
        score += first_match(_PPSF_SCORE, ppsf, default=0)
    if prop.square_feet > 2000:
        score += 10
    if prop.bedrooms >= 3:
        score += 5
    score += first_match(_DOM_SCORE, days_on_market(prop, now), default=0)
    return max(0, min(100, score))


def estimated_monthly_rent(prop: Property) -> float:
    """Rough rent: 0.6% of the price plus $0.80 per square foot."""
    return prop.price * 0.006 + prop.square_feet * 0.8


def roi_estimate(prop: Property) -> Optional[float]:
    """Gross annual yield in percent; None when the price is unknown."""
    if prop.price <= 0:
        return None
    return estimated_monthly_rent(prop) * 12 / prop.price * 100


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

PRICE_BANDS: list[tuple[str, str, int, float]] = [
    ("Under $200K", "Entry Level", 0, 200_000),
    ("$200K - $400K", "Mid-Market", 200_000, 400_000),
    ("$400K - $600K", "Upper Mid-Market", 400_000, 600_000),
    ("$600K - $800K", "Premium", 600_000, 800_000),
    ("$800K - $1M", "Luxury", 800_000, 1_000_000),
    ("Over $1M", "Ultra-Luxury", 1_000_000, math.inf),
]


@dataclass(frozen=True)
class PriceBand:
    label: str
    category: str
    count: int
    share: float
    average_price: float
    average_days_on_market: float


def price_bands(properties: Sequence[Property], now: datetime) -> list[PriceBand]:
    bands = []
    for label, category, low, high in PRICE_BANDS:
        members = [p for p in properties if low <= p.price < high]
        bands.append(PriceBand(
            label=label,
            category=category,
            count=len(members),
            share=activity_rate(len(members), len(properties)),
            average_price=mean(p.price for p in members),
            average_days_on_market=mean(days_on_market(p, now) for p in members),
        ))
    return bands


@dataclass(frozen=True)
class AreaSummary:
    city: str
    state: str
    count: int
    average_price: float
    median_price: float
    average_price_per_sqft: Optional[float]
    average_days_on_market: float


def group_by_area(properties: Sequence[Property], now: datetime) -> list[AreaSummary]:
    """Per (city, state) rollups, largest area first."""
    groups: dict[tuple[str, str], list[Property]] = {}
    for prop in properties:
        groups.setdefault((prop.city, prop.state), []).append(prop)

    summaries = []
    for (city, state), members in groups.items():
        ppsf = [v for v in (price_per_sqft(p) for p in members) if v is not None]
        summaries.append(AreaSummary(
            city=city,
            state=state,
            count=len(members),
            average_price=mean(p.price for p in members),
            median_price=median(p.price for p in members),
            average_price_per_sqft=mean(ppsf) if ppsf else None,
            average_days_on_market=mean(days_on_market(p, now) for p in members),
        ))
    summaries.sort(key=lambda s: (-s.count, s.city, s.state))
    return summaries


@dataclass(frozen=True)
class AgentSummary:
    name: str
    phone: str
    email: str
    count: int
    average_price: float
    min_price: int
    max_price: int
    property_types: tuple[str, ...]


def group_by_agent(properties: Sequence[Property]) -> list[AgentSummary]:
    """Per (agent name, phone) rollups, busiest agent first; email is the first one seen."""
    groups: dict[tuple[str, str], list[Property]] = {}
    for prop in properties:
        groups.setdefault((prop.agent.name, prop.agent.phone), []).append(prop)

    summaries = []
    for (name, phone), members in groups.items():
        prices = [p.price for p in members]
        summaries.append(AgentSummary(
            name=name,
            phone=phone,
            email=members[0].agent.email,
            count=len(members),
            average_price=mean(prices),
            min_price=min(prices),
            max_price=max(prices),
            property_types=tuple(dict.fromkeys(p.property_type for p in members)),
        ))
    summaries.sort(key=lambda s: (-s.count, s.name, s.phone))
    return summaries


def type_counts(properties: Sequence[Property]) -> list[tuple[str, int]]:
    """Property types by frequency; ties broken alphabetically."""
    counts = Counter(p.property_type for p in properties)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))


_POSITION: Ladder = [
    (lambda pct: pct < 25, "Lower quartile"),
    (lambda pct: pct < 50, "Below median"),
    (lambda pct: pct < 75, "Above median"),
    (lambda pct: True, "Upper quartile"),
]


def market_position(price: int, prices: Sequence[int]) -> str:
    """Quartile of a price within the listed prices."""
    if not prices:
        return NOT_AVAILABLE
    ordered = sorted(prices)
    below = sum(1 for p in ordered if p < price)
    return first_match(_POSITION, below / len(ordered) * 100)


# ---------------------------------------------------------------------------
# Threshold ladders
# ---------------------------------------------------------------------------

# (average price, activity rate)
MARKET_TONE: Ladder = [
    (lambda price, rate: price > 800_000 and rate > 15, "high-end luxury market with strong activity"),
    (lambda price, rate: price > 500_000 and rate > 10, "upscale market with good momentum"),
    (lambda price, rate: price > 300_000 and rate > 8, "mid-market with steady growth"),
    (lambda price, rate: rate > 15, "highly active market with competitive pricing"),
    (lambda price, rate: rate > 8, "moderately active market with balanced conditions"),
    (lambda price, rate: True, "stable market with measured activity"),
]

# (activity rate)
ACTIVITY_LEVEL: Ladder = [
    (lambda rate: rate > 20, "Very High"),
    (lambda rate: rate > 15, "High"),
    (lambda rate: rate > 10, "Moderate"),
    (lambda rate: rate > 5, "Low"),
    (lambda rate: True, "Very Low"),
]

# (listing count)
INVENTORY_STATUS: Ladder = [
    (lambda count: count > 100, "High inventory - buyer's market conditions"),
    (lambda count: count > 50, "Moderate inventory - balanced market"),
    (lambda count: count > 20, "Low inventory - seller's market"),
    (lambda count: True, "Very low inventory - highly competitive"),
]

# (activity rate, listing count)
MARKET_STATUS: Ladder = [
    (lambda rate, count: rate > 20 and count < 50, "Hot Market - High Demand"),
    (lambda rate, count: rate > 15, "Active Market - Good Momentum"),
    (lambda rate, count: rate > 8, "Moderate Market - Balanced"),
    (lambda rate, count: count > 80, "Buyer's Market - High Inventory"),
    (lambda rate, count: True, "Stable Market - Steady Activity"),
]

# (average days on market)
MARKET_VELOCITY: Ladder = [
    (lambda days: days < 30, "Fast-moving market - act quickly"),
    (lambda days: days < 60, "Normal market velocity"),
    (lambda days: True, "Slow market - good for negotiation"),
]

# (average price)
PRICE_POSITIONING: Ladder = [
    (lambda price: price < 200_000, "Entry-level market"),
    (lambda price: price < 400_000, "Mid-market pricing"),
    (lambda price: price < 600_000, "Upper mid-market"),
    (lambda price: True, "Luxury market segment"),
]

# (activity rate)
GROWTH_POTENTIAL: Ladder = [
    (lambda rate: rate > 20, "High - Strong market activity"),
    (lambda rate: rate > 10, "Medium - Moderate growth"),
    (lambda rate: True, "Low - Stable market"),
]

# (coefficient of variation, %)
VOLATILITY_LEVEL: Ladder = [
    (lambda cv: cv > 30, "High"),
    (lambda cv: cv > 15, "Medium"),
    (lambda cv: True, "Low"),
]

# (investment score)
INVESTMENT_RATING: Ladder = [
    (lambda score: score >= 80, "Excellent"),
    (lambda score: score >= 70, "Good"),
    (lambda score: score >= 60, "Fair"),
    (lambda score: score >= 50, "Average"),
    (lambda score: True, "Poor"),
]

INVESTMENT_RECOMMENDATION: Ladder = [
    (lambda score: score >= 80, "Strong Buy"),
    (lambda score: score >= 70, "Buy"),
    (lambda score: score >= 60, "Consider"),
    (lambda score: score >= 50, "Hold"),
    (lambda score: True, "Avoid"),
]

# (gross yield, %)
ROI_POTENTIAL: Ladder = [
    (lambda roi: roi >= 10, "High"),
    (lambda roi: roi >= 8, "Good"),
    (lambda roi: roi >= 6, "Moderate"),
    (lambda roi: True, "Low"),
]

# (price per sq ft)
PRICE_PER_SQFT_INSIGHT: Ladder = [
    (lambda ppsf: ppsf < 100, "Excellent value - below market average"),
    (lambda ppsf: ppsf < 200, "Good value - competitive pricing"),
    (lambda ppsf: ppsf < 300, "Average value - market rate"),
    (lambda ppsf: True, "Premium pricing - luxury market"),
]


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MarketSnapshot:
    """Statistics shared by every sheet of one report."""

    location: str
    now: datetime
    count: int
    average_price: float
    median_price: float
    min_price: int
    max_price: int
    recent_count: int
    activity_rate: float
    average_price_per_sqft: Optional[float]
    average_days_on_market: float
    volatility: float
    new_construction_count: int
    price_reduced_count: int

    @classmethod
    def from_properties(
        cls,
        properties: Sequence[Property],
        location: str,
        now: Optional[datetime] = None,
    ) -> "MarketSnapshot":
        now = now or datetime.now(timezone.utc)
        prices = [p.price for p in properties]
        low, high = price_range(properties)
        recent = recent_count(properties, now)
        ppsf = [v for v in (price_per_sqft(p) for p in properties) if v is not None]
        return cls(
            location=location,
            now=now,
            count=len(properties),
            average_price=mean(prices),
            median_price=median(prices),
            min_price=low,
            max_price=high,
            recent_count=recent,
            activity_rate=activity_rate(recent, len(properties)),
            average_price_per_sqft=mean(ppsf) if ppsf else None,
            average_days_on_market=mean(days_on_market(p, now) for p in properties),
            volatility=price_volatility(prices),
            new_construction_count=sum(1 for p in properties if p.is_new_construction),
            price_reduced_count=sum(1 for p in properties if p.price_reduced_amount > 0),
        )

    @property
    def market_tone(self) -> str:
        return first_match(MARKET_TONE, self.average_price, self.activity_rate)

    @property
    def activity_level(self) -> str:
        return first_match(ACTIVITY_LEVEL, self.activity_rate)

    @property
    def inventory_status(self) -> str:
        return first_match(INVENTORY_STATUS, self.count)

    @property
    def market_status(self) -> str:
        return first_match(MARKET_STATUS, self.activity_rate, self.count)

    @property
    def market_velocity(self) -> str:
        return first_match(MARKET_VELOCITY, self.average_days_on_market)

    @property
    def price_positioning(self) -> str:
        return first_match(PRICE_POSITIONING, self.average_price)

    @property
    def growth_potential(self) -> str:
        return first_match(GROWTH_POTENTIAL, self.activity_rate)

    @property
    def volatility_level(self) -> str:
        return first_match(VOLATILITY_LEVEL, self.volatility)
