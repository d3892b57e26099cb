"""
Template narrative for reports
==============================
Every block is plain text built from a MarketSnapshot and the listings it
was computed from. No randomness and no clock reads: the same inputs
always produce the same text, and the season comes from snapshot.now.
"""

from typing import Sequence

from house_finder.metrics import (
    MarketSnapshot,
    activity_rate,
    estimated_monthly_rent,
    first_match,
    investment_score,
    price_per_sqft,
    recent_count,
    roi_estimate,
)
from house_finder.models import Property

BULLET = "• "
VALUE_PPSF_CEILING = 250


def format_currency(value: float) -> str:
    return f"${round(value):,}"


def _bullets(lines: Sequence[str]) -> str:
    return "\n".join(BULLET + line for line in lines)


def value_opportunity_count(properties: Sequence[Property]) -> int:
    values = [price_per_sqft(p) for p in properties]
    return sum(1 for v in values if v is not None and v < VALUE_PPSF_CEILING)


def risk_factors(snapshot: MarketSnapshot) -> list[str]:
    risks = []
    if snapshot.count < 20:
        risks.append("Low inventory")
    if snapshot.count > 100:
        risks.append("High inventory")
    if snapshot.average_price > 800_000:
        risks.append("Luxury market volatility")
    if snapshot.volatility_level == "High":
        risks.append("High price variation")
    if snapshot.average_days_on_market > 90:
        risks.append("Slow-moving inventory")
    return risks


def market_intelligence_summary(snapshot: MarketSnapshot) -> str:
    return "\n".join([
        "MARKET INTELLIGENCE SUMMARY",
        "",
        f"The {snapshot.location} real estate market is a {snapshot.market_tone}.",
        "",
        "MARKET DYNAMICS:",
        _bullets([
            f"Average listing price: {format_currency(snapshot.average_price)}",
            f"Price range spans: {format_currency(snapshot.min_price)} - {format_currency(snapshot.max_price)}",
            f"Market activity level: {snapshot.activity_level} "
            f"({snapshot.recent_count} new listings in past 7 days)",
            f"Inventory status: {snapshot.inventory_status}",
        ]),
    ])


def market_insights(properties: Sequence[Property], snapshot: MarketSnapshot) -> str:
    risks = risk_factors(snapshot)
    return "\n".join([
        "MARKET INSIGHTS",
        "",
        "PRICING DYNAMICS:",
        _bullets([
            f"Average market price: {format_currency(snapshot.average_price)}",
            f"Price volatility: {snapshot.volatility:.0f}% ({snapshot.volatility_level})",
            f"Market positioning: {snapshot.price_positioning}",
        ]),
        "",
        "ACTIVITY INDICATORS:",
        _bullets([
            f"Recent listing activity: {snapshot.recent_count} properties in last 7 days",
            f"Market velocity: {snapshot.market_velocity}",
            f"Inventory levels: {snapshot.inventory_status}",
        ]),
        "",
        "INVESTMENT LANDSCAPE:",
        _bullets([
            f"Value opportunities: {value_opportunity_count(properties)} properties identified",
            f"Growth potential: {snapshot.growth_potential}",
            f"Risk factors: {', '.join(risks) if risks else 'Low risk market'}",
        ]),
    ])


def investment_opportunities(properties: Sequence[Property], snapshot: MarketSnapshot) -> str:
    lines = []
    if snapshot.average_price_per_sqft is not None and snapshot.average_price_per_sqft < 200:
        lines.append("Below-market pricing indicates strong value opportunities")
    if snapshot.new_construction_count:
        lines.append(f"{snapshot.new_construction_count} new construction properties available")
    if snapshot.price_reduced_count:
        lines.append(
            f"{snapshot.price_reduced_count} properties with recent price reductions"
            " - potential negotiation opportunities"
        )
    rental = 0
    for prop in properties:
        ppsf = price_per_sqft(prop)
        if ppsf is not None and ppsf < 300 and prop.bedrooms >= 2:
            rental += 1
    if rental:
        lines.append(f"{rental} properties identified as strong rental investment candidates")
    if not lines:
        lines.append("Market analysis suggests waiting for better opportunities to emerge")
    return _bullets(lines)


# month ranges are inclusive
_SEASONS = [
    (lambda month: 3 <= month <= 6, "Spring market peak - optimal selling conditions"),
    (lambda month: 7 <= month <= 9, "Summer market - good activity with competitive pricing"),
    (lambda month: True, "Off-season market - potential for better deals"),
]

_PRICE_PRESSURE = [
    (lambda rate: rate > 20, "Strong upward price pressure expected in next 3-6 months"),
    (lambda rate: rate > 10, "Moderate price appreciation anticipated"),
    (lambda rate: True, "Stable pricing with potential for slight increases"),
]


def market_predictions(properties: Sequence[Property], snapshot: MarketSnapshot) -> str:
    monthly_rate = activity_rate(recent_count(properties, snapshot.now, 30), snapshot.count)
    lines = [
        first_match(_PRICE_PRESSURE, monthly_rate),
        first_match(_SEASONS, snapshot.now.month),
    ]
    if snapshot.count < 30:
        lines.append("Low inventory likely to drive price increases")
    elif snapshot.count > 80:
        lines.append("High inventory may create buyer opportunities")
    return _bullets(lines)


_TIMING = [
    (lambda rate: rate > 15, "ACT QUICKLY: High market activity requires immediate action on desirable properties"),
    (lambda rate: rate > 8, "STRATEGIC TIMING: Monitor market closely and be prepared to move on opportunities"),
    (lambda rate: True, "PATIENT APPROACH: Take time to evaluate options and negotiate favorable terms"),
]

_SEGMENT = [
    (lambda price: price > 600_000, "LUXURY MARKET: Focus on unique features and premium positioning"),
    (lambda price: price > 300_000, "MID-MARKET STRATEGY: Emphasize value and location benefits"),
    (lambda price: True, "AFFORDABLE MARKET: Highlight investment potential and growth opportunities"),
]


def strategic_recommendations(snapshot: MarketSnapshot) -> str:
    return _bullets([
        first_match(_TIMING, snapshot.activity_rate),
        first_match(_SEGMENT, snapshot.average_price),
        "DATA-DRIVEN DECISIONS: Use market intelligence to inform pricing and timing strategies",
        "PROFESSIONAL GUIDANCE: Consult with local market experts for personalized advice",
    ])


def investment_narrative(properties: Sequence[Property], snapshot: MarketSnapshot) -> str:
    scores = [investment_score(p, snapshot.now) for p in properties]
    yields = [y for y in (roi_estimate(p) for p in properties) if y is not None]
    strong = sum(1 for s in scores if s >= 70)
    average_rent = sum(estimated_monthly_rent(p) for p in properties) / len(properties) if properties else 0
    average_yield = sum(yields) / len(yields) if yields else 0
    return "\n".join([
        "INVESTMENT OUTLOOK",
        "",
        f"{snapshot.location}: {snapshot.count} properties scored, {strong} rated Good or better.",
        _bullets([
            f"Estimated average monthly rent: {format_currency(average_rent)}",
            f"Estimated average gross yield: {average_yield:.1f}%",
            f"Market status: {snapshot.market_status}",
            f"Price positioning: {snapshot.price_positioning}",
        ]),
        "",
        "Rent estimates use 0.6% of list price plus $0.80 per square foot and are indicative only.",
    ])
