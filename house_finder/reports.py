"""
Report Synthesizer
==================
Turns a list of normalized listings plus a location label into an ordered
list of ReportSheets. Four variants:

  property_listings     — Executive Summary, Market Analysis, Property
                          Details, Investment Opportunities, Market
                          Predictions, Agent Contacts
  market_intelligence   — Market Overview, Competitive Analysis, Neighborhood
                          Insights, Market Trends, Strategic Recommendations
  investment_analysis   — Investment Overview, ROI Analysis, Risk Assessment,
                          Portfolio Recommendations, Market Forecast
  listings_export       — Properties, Summary, Market Analysis (plain
                          tables for the raw listings download)

Every sheet of a report reads from one MarketSnapshot, so statistics agree
across sheets. Long narrative text is embedded as a single-cell row.
Synchronous, no I/O; exporting the sheets is export.py's job.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from house_finder.errors import ReportError
from house_finder.metrics import (
    INVESTMENT_RATING,
    INVESTMENT_RECOMMENDATION,
    NOT_AVAILABLE,
    PRICE_PER_SQFT_INSIGHT,
    ROI_POTENTIAL,
    MarketSnapshot,
    days_on_market,
    estimated_monthly_rent,
    first_match,
    group_by_agent,
    group_by_area,
    investment_score,
    market_position,
    median,
    price_bands,
    price_per_sqft,
    roi_estimate,
    type_counts,
)
from house_finder.models import Property
from house_finder.narrative import (
    format_currency,
    investment_narrative,
    investment_opportunities,
    market_insights,
    market_intelligence_summary,
    market_predictions,
    risk_factors,
    strategic_recommendations,
)

Cell = Union[str, int, float]
Row = list[Cell]

TOP_PICKS = 5


@dataclass
class ReportSheet:
    name: str
    rows: list[Row] = field(default_factory=list)


SheetBuilder = Callable[[Sequence[Property], MarketSnapshot], list[Row]]


# ---------------------------------------------------------------------------
# Shared cell helpers
# ---------------------------------------------------------------------------

def _ppsf_cell(prop: Property) -> Cell:
    value = price_per_sqft(prop)
    return NOT_AVAILABLE if value is None else round(value)


def _optional_currency(value: Optional[float]) -> str:
    return NOT_AVAILABLE if value is None else format_currency(value)


def _percent(value: float) -> str:
    return f"{value:.1f}%"


def _label(tag: str) -> str:
    return tag.replace("_", " ").title()


def _property_insights(prop: Property) -> str:
    insights = []
    ppsf = price_per_sqft(prop)
    if ppsf is not None and ppsf < 200:
        insights.append("Excellent value")
    if prop.square_feet > 2000:
        insights.append("Large property")
    if prop.is_new_construction:
        insights.append("New construction")
    if prop.price_reduced_amount > 0:
        insights.append(f"Price reduced by {format_currency(prop.price_reduced_amount)}")
    return ", ".join(insights) or "Standard listing"


def _investment_reason(prop: Property) -> str:
    ppsf = price_per_sqft(prop)
    if ppsf is not None and ppsf < 200:
        return "Below-market pricing"
    if prop.square_feet > 2000:
        return "Large property size"
    if prop.is_new_construction:
        return "New construction"
    return "Good market position"


def _property_risks(prop: Property, now: datetime) -> list[str]:
    risks = []
    if days_on_market(prop, now) > 90:
        risks.append("Long time on market")
    if prop.price > 800_000:
        risks.append("High price point")
    if 0 < prop.year_built < 1990:
        risks.append("Older property")
    if prop.square_feet <= 0:
        risks.append("Unknown living area")
    return risks


def _ranked(properties: Sequence[Property], now: datetime) -> list[tuple[int, Property]]:
    """Properties by investment score, best first; ties keep input order."""
    scored = [(investment_score(p, now), p) for p in properties]
    return sorted(scored, key=lambda item: -item[0])


def _key_metrics(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    types = type_counts(properties)
    return [
        ["Average Price", format_currency(snapshot.average_price)],
        ["Median Price", format_currency(snapshot.median_price)],
        ["Price Range", f"{format_currency(snapshot.min_price)} - {format_currency(snapshot.max_price)}"],
        ["Average Price per Sq Ft", _optional_currency(snapshot.average_price_per_sqft)],
        ["Total Inventory", snapshot.count],
        ["New Listings (7 days)", snapshot.recent_count],
        ["Market Activity", _percent(snapshot.activity_rate)],
        ["Market Status", snapshot.market_status],
        ["Most Common Type", _label(types[0][0]) if types else NOT_AVAILABLE],
        ["Market Velocity", snapshot.market_velocity],
    ]


_FORECAST: list[Row] = [
    ["Forecast Period", "Predicted Change", "Confidence Level", "Key Factors"],
    ["3 Months", "+2-5%", "High", "Seasonal trends, inventory levels"],
    ["6 Months", "+3-8%", "Medium", "Economic conditions, interest rates"],
    ["12 Months", "+5-12%", "Medium", "Long-term market trends, development"],
]


# ---------------------------------------------------------------------------
# property_listings
# ---------------------------------------------------------------------------

def executive_summary(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        [f"Property Market Analysis: {snapshot.location}"],
        [f"Generated: {snapshot.now.date().isoformat()} | Properties Analyzed: {snapshot.count}"],
        [],
        [market_intelligence_summary(snapshot)],
        [],
        ["KEY MARKET METRICS"],
        *_key_metrics(properties, snapshot),
    ]


def market_analysis(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        [f"Market Analysis: {snapshot.location}"],
        [],
        [market_insights(properties, snapshot)],
        [],
        ["Market Metric", "Value", "Analysis"],
        ["Average Price", format_currency(snapshot.average_price), snapshot.price_positioning],
        ["Median Price", format_currency(snapshot.median_price), "Middle of the listed price range"],
        ["New Listings (7 days)", snapshot.recent_count, snapshot.activity_level],
        ["Average Days on Market", round(snapshot.average_days_on_market), snapshot.market_velocity],
        ["Price Volatility", _percent(snapshot.volatility), snapshot.volatility_level],
        [
            "Average Price per Sq Ft",
            _optional_currency(snapshot.average_price_per_sqft),
            NOT_AVAILABLE if snapshot.average_price_per_sqft is None
            else first_match(PRICE_PER_SQFT_INSIGHT, snapshot.average_price_per_sqft),
        ],
    ]


def property_details(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    prices = [p.price for p in properties]
    rows: list[Row] = [
        ["Detailed Property Analysis"],
        [],
        ["Property ID", "Address", "City", "State", "Price", "Beds", "Baths", "Sq Ft", "Price/SqFt",
         "Type", "Year Built", "Days Listed", "Investment Score", "Market Position", "Agent", "Insights", "URL"],
    ]
    for prop in properties:
        rows.append([
            prop.id,
            prop.address,
            prop.city,
            prop.state,
            format_currency(prop.price),
            prop.bedrooms,
            prop.bathrooms,
            prop.square_feet,
            _ppsf_cell(prop),
            _label(prop.property_type),
            prop.year_built or "Unknown",
            days_on_market(prop, snapshot.now),
            investment_score(prop, snapshot.now),
            market_position(prop.price, prices),
            prop.agent.name,
            _property_insights(prop),
            prop.url,
        ])
    return rows


def investment_opportunities_sheet(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Investment Opportunities Analysis"],
        [],
        [investment_opportunities(properties, snapshot)],
        [],
        ["Top Investment Properties"],
        ["Address", "Price", "Score", "Reason"],
    ]
    for score, prop in _ranked(properties, snapshot.now)[:TOP_PICKS]:
        rows.append([prop.address, format_currency(prop.price), score, _investment_reason(prop)])
    return rows


def market_predictions_sheet(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        [f"Market Predictions: {snapshot.location}"],
        [],
        [market_predictions(properties, snapshot)],
        [],
        *[list(row) for row in _FORECAST],
    ]


def agent_contacts(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Agent Contacts"],
        [],
        ["Agent Name", "Phone", "Email", "Properties Listed", "Average Price", "Price Range", "Property Types"],
    ]
    for agent in group_by_agent(properties):
        rows.append([
            agent.name,
            agent.phone,
            agent.email,
            agent.count,
            format_currency(agent.average_price),
            f"{format_currency(agent.min_price)} - {format_currency(agent.max_price)}",
            ", ".join(_label(tag) for tag in agent.property_types),
        ])
    return rows


# ---------------------------------------------------------------------------
# market_intelligence
# ---------------------------------------------------------------------------

def market_overview(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        [f"Market Overview: {snapshot.location}"],
        [],
        [market_intelligence_summary(snapshot)],
        [],
        ["Metric", "Value"],
        *_key_metrics(properties, snapshot),
        [],
        ["Property Type", "Count", "Share"],
    ]
    for tag, count in type_counts(properties):
        rows.append([_label(tag), count, _percent(count / snapshot.count * 100)])
    return rows


def competitive_analysis(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Competitive Price Band Analysis"],
        [],
        ["Price Range", "Category", "Count", "Share", "Average Price", "Avg Days on Market"],
    ]
    for band in price_bands(properties, snapshot.now):
        rows.append([
            band.label,
            band.category,
            band.count,
            _percent(band.share),
            format_currency(band.average_price) if band.count else NOT_AVAILABLE,
            round(band.average_days_on_market) if band.count else NOT_AVAILABLE,
        ])
    return rows


def neighborhood_insights(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Neighborhood Insights"],
        [],
        ["City", "State", "Listings", "Average Price", "Median Price", "Avg Price/SqFt", "Avg Days on Market",
         "Market Share"],
    ]
    for area in group_by_area(properties, snapshot.now):
        rows.append([
            area.city,
            area.state,
            area.count,
            format_currency(area.average_price),
            format_currency(area.median_price),
            _optional_currency(area.average_price_per_sqft),
            round(area.average_days_on_market),
            _percent(area.count / snapshot.count * 100),
        ])
    return rows


_DOM_BUCKETS = [
    ("0-7 days", 0, 7),
    ("8-30 days", 8, 30),
    ("31-60 days", 31, 60),
    ("61-90 days", 61, 90),
    ("Over 90 days", 91, None),
]


def market_trends(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    days = [days_on_market(p, snapshot.now) for p in properties]
    rows: list[Row] = [
        ["Days on Market Trends"],
        [],
        ["Average Days on Market", round(snapshot.average_days_on_market)],
        ["Median Days on Market", round(median(days))],
        ["Market Velocity", snapshot.market_velocity],
        ["Growth Potential", snapshot.growth_potential],
        [],
        ["Days on Market", "Listings", "Share"],
    ]
    for label, low, high in _DOM_BUCKETS:
        count = sum(1 for d in days if d >= low and (high is None or d <= high))
        rows.append([label, count, _percent(count / snapshot.count * 100)])
    return rows


def strategic_recommendations_sheet(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        [f"Strategic Recommendations: {snapshot.location}"],
        [],
        [strategic_recommendations(snapshot)],
        [],
        ["Market Status", snapshot.market_status],
        ["Inventory", snapshot.inventory_status],
    ]


# ---------------------------------------------------------------------------
# investment_analysis
# ---------------------------------------------------------------------------

_SCORE_TIERS = [
    ("High Potential (80+ score)", 80, 101, "Strong investment opportunities"),
    ("Good Potential (60-79 score)", 60, 80, "Solid investment options"),
    ("Moderate Potential (40-59 score)", 40, 60, "Consider with caution"),
    ("Low Potential (<40 score)", 0, 40, "High risk investments"),
]


def investment_overview(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    scores = [investment_score(p, snapshot.now) for p in properties]
    rows: list[Row] = [
        [f"Investment Overview: {snapshot.location}"],
        [],
        [investment_narrative(properties, snapshot)],
        [],
        ["Metric", "Value", "Analysis"],
        ["Average Investment Score", round(sum(scores) / len(scores), 1),
         first_match(INVESTMENT_RATING, sum(scores) / len(scores))],
    ]
    for label, low, high, analysis in _SCORE_TIERS:
        rows.append([label, sum(1 for s in scores if low <= s < high), analysis])
    return rows


def roi_analysis(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["ROI Analysis (estimated rent: 0.6% of price + $0.80 per sq ft)"],
        [],
        ["Address", "Price", "Est. Monthly Rent", "Est. Annual Rent", "Gross Yield", "ROI Potential",
         "Investment Score", "Rating", "Recommendation"],
    ]
    for prop in properties:
        rent = estimated_monthly_rent(prop)
        roi = roi_estimate(prop)
        score = investment_score(prop, snapshot.now)
        rows.append([
            prop.address,
            format_currency(prop.price),
            format_currency(rent),
            format_currency(rent * 12),
            NOT_AVAILABLE if roi is None else _percent(roi),
            NOT_AVAILABLE if roi is None else first_match(ROI_POTENTIAL, roi),
            score,
            first_match(INVESTMENT_RATING, score),
            first_match(INVESTMENT_RECOMMENDATION, score),
        ])
    return rows


def risk_assessment(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    tally: dict[str, int] = {}
    for prop in properties:
        for risk in _property_risks(prop, snapshot.now):
            tally[risk] = tally.get(risk, 0) + 1

    market_risks = risk_factors(snapshot)
    rows: list[Row] = [
        ["Risk Assessment"],
        [],
        ["Risk Factor", "Properties Affected", "Share"],
    ]
    for risk, count in sorted(tally.items(), key=lambda item: (-item[1], item[0])):
        rows.append([risk, count, _percent(count / snapshot.count * 100)])
    if not tally:
        rows.append(["No property-level risk factors", 0, _percent(0)])
    rows.extend([
        [],
        ["Market Risk Factors"],
        [", ".join(market_risks) if market_risks else "Low risk market"],
        ["Price Volatility", _percent(snapshot.volatility), snapshot.volatility_level],
    ])
    return rows


def portfolio_recommendations(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Portfolio Recommendations"],
        [],
        ["Rank", "Address", "Type", "Price", "Score", "Recommendation", "Reason"],
    ]
    for rank, (score, prop) in enumerate(_ranked(properties, snapshot.now)[:TOP_PICKS], start=1):
        rows.append([
            rank,
            prop.address,
            _label(prop.property_type),
            format_currency(prop.price),
            score,
            first_match(INVESTMENT_RECOMMENDATION, score),
            _investment_reason(prop),
        ])

    types = type_counts(properties)
    rows.extend([[], ["Diversification"]])
    if len(types) > 1:
        rows.append([f"{len(types)} property types available; spread holdings across "
                     f"{_label(types[0][0])} and {_label(types[1][0])}"])
    else:
        rows.append(["Single property type listed; consider neighboring markets for diversification"])
    return rows


def market_forecast(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        [f"Market Forecast: {snapshot.location}"],
        [],
        [market_predictions(properties, snapshot)],
        [],
        *[list(row) for row in _FORECAST],
        [],
        ["Growth Potential", snapshot.growth_potential],
    ]


# ---------------------------------------------------------------------------
# listings_export (plain tables, no narrative)
# ---------------------------------------------------------------------------

def listings_table(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [
        ["Property ID", "Address", "City", "State", "ZIP", "Price", "Bedrooms", "Bathrooms", "Square Feet",
         "Lot Size (sq ft)", "Property Type", "Status", "List Date", "Year Built", "Agent Name", "Agent Phone",
         "Agent Email", "Latitude", "Longitude", "Property URL", "Price per Sq Ft", "Days on Market",
         "Last Updated"],
    ]
    for prop in properties:
        rows.append([
            prop.id,
            prop.address,
            prop.city,
            prop.state,
            prop.postal_code,
            prop.price,
            prop.bedrooms,
            prop.bathrooms,
            prop.square_feet,
            prop.lot_size,
            _label(prop.property_type),
            _label(prop.status),
            prop.list_date.strftime("%m/%d/%Y"),
            prop.year_built or "Unknown",
            prop.agent.name,
            prop.agent.phone,
            prop.agent.email,
            prop.coordinates.lat,
            prop.coordinates.lng,
            prop.url,
            _ppsf_cell(prop),
            days_on_market(prop, snapshot.now),
            prop.last_updated.strftime("%m/%d/%Y %H:%M"),
        ])
    return rows


def _distribution(title: str, counts: Counter, unit: str) -> list[Row]:
    rows: list[Row] = [[title, ""]]
    for key in sorted(counts):
        rows.append([f"  {key:g} {unit}" if unit else f"  {_label(key)}", counts[key]])
    return rows


def listings_summary(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    return [
        ["Metric", "Value"],
        ["Total Properties", snapshot.count],
        ["Total Market Value", format_currency(sum(p.price for p in properties))],
        ["Average Price", format_currency(snapshot.average_price)],
        ["Lowest Price", format_currency(snapshot.min_price)],
        ["Highest Price", format_currency(snapshot.max_price)],
        ["Report Generated", snapshot.now.strftime("%m/%d/%Y %H:%M")],
        [],
        *_distribution("Property Types", Counter(p.property_type for p in properties), ""),
        [],
        *_distribution("Bedroom Distribution", Counter(p.bedrooms for p in properties), "bedrooms"),
        [],
        *_distribution("Bathroom Distribution", Counter(p.bathrooms for p in properties), "bathrooms"),
    ]


def price_distribution(properties: Sequence[Property], snapshot: MarketSnapshot) -> list[Row]:
    rows: list[Row] = [["Price Range", "Count", "Percentage"]]
    for band in price_bands(properties, snapshot.now):
        rows.append([band.label, band.count, _percent(band.share)])
    rows.extend([
        [],
        ["Average Days on Market", round(snapshot.average_days_on_market), "days"],
        ["New Listings (7 days)", snapshot.recent_count, _percent(snapshot.activity_rate)],
    ])
    return rows


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

REPORT_VARIANTS: dict[str, list[tuple[str, SheetBuilder]]] = {
    "property_listings": [
        ("Executive Summary", executive_summary),
        ("Market Analysis", market_analysis),
        ("Property Details", property_details),
        ("Investment Opportunities", investment_opportunities_sheet),
        ("Market Predictions", market_predictions_sheet),
        ("Agent Contacts", agent_contacts),
    ],
    "market_intelligence": [
        ("Market Overview", market_overview),
        ("Competitive Analysis", competitive_analysis),
        ("Neighborhood Insights", neighborhood_insights),
        ("Market Trends", market_trends),
        ("Strategic Recommendations", strategic_recommendations_sheet),
    ],
    "investment_analysis": [
        ("Investment Overview", investment_overview),
        ("ROI Analysis", roi_analysis),
        ("Risk Assessment", risk_assessment),
        ("Portfolio Recommendations", portfolio_recommendations),
        ("Market Forecast", market_forecast),
    ],
    "listings_export": [
        ("Properties", listings_table),
        ("Summary", listings_summary),
        ("Market Analysis", price_distribution),
    ],
}


def build_report(
    variant: str,
    properties: Sequence[Property],
    location: str,
    now: Optional[datetime] = None,
) -> list[ReportSheet]:
    """Ordered sheets for a report variant; raises ReportError for an unknown variant."""
    builders = REPORT_VARIANTS.get(variant)
    if builders is None:
        raise ReportError(
            f"Unknown report variant '{variant}'. Choose one of: {', '.join(REPORT_VARIANTS)}."
        )

    if not properties:
        return [
            ReportSheet(name, [[name], [f"No properties found for {location}"]])
            for name, _ in builders
        ]

    snapshot = MarketSnapshot.from_properties(properties, location, now)
    return [ReportSheet(name, builder(properties, snapshot)) for name, builder in builders]
