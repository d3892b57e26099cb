"""
Location Parser
===============
Turns a free-text location into a ParsedLocation:

  1. any 5-digit ZIP (optionally ZIP+4)      → postal_code
  2. "<city>, <two-letter state>"            → city + state (uppercased)
  3. a bare city name                        → city + state from CITY_STATES,
                                               or city alone if unknown
  4. empty / anything else                   → None ("unparseable")

parse_location never raises. require_location is the raising variant for
callers that cannot degrade.
"""

import re
from typing import Optional

from house_finder.errors import LocationParseError
from house_finder.models import ParsedLocation

_ZIP_RE = re.compile(r"\b(\d{5}(?:-\d{4})?)\b")
_CITY_STATE_RE = re.compile(r"^([^,]+),\s*([A-Za-z]{2})$")
_CITY_ONLY_RE = re.compile(r"^([^,]+)$")

# ---------------------------------------------------------------------------
# Static city → state lookup (largest US cities; lowercase keys)
# ---------------------------------------------------------------------------

CITY_STATES: dict[str, str] = {
    "new york": "NY", "los angeles": "CA", "chicago": "IL", "houston": "TX",
    "phoenix": "AZ", "philadelphia": "PA", "san antonio": "TX", "san diego": "CA",
    "dallas": "TX", "san jose": "CA", "austin": "TX", "jacksonville": "FL",
    "fort worth": "TX", "columbus": "OH", "charlotte": "NC", "san francisco": "CA",
    "indianapolis": "IN", "seattle": "WA", "denver": "CO", "washington": "DC",
    "boston": "MA", "el paso": "TX", "nashville": "TN", "memphis": "TN",
    "knoxville": "TN", "chattanooga": "TN", "clarksville": "TN", "detroit": "MI",
    "portland": "OR", "las vegas": "NV", "milwaukee": "WI", "albuquerque": "NM",
    "tucson": "AZ", "fresno": "CA", "sacramento": "CA", "mesa": "AZ",
    "kansas city": "MO", "atlanta": "GA", "long beach": "CA", "colorado springs": "CO",
    "raleigh": "NC", "miami": "FL", "virginia beach": "VA", "omaha": "NE",
    "oakland": "CA", "minneapolis": "MN", "tulsa": "OK", "arlington": "TX",
    "tampa": "FL", "new orleans": "LA", "wichita": "KS", "bakersfield": "CA",
    "cleveland": "OH", "aurora": "CO", "anaheim": "CA", "honolulu": "HI",
    "santa ana": "CA", "corpus christi": "TX", "riverside": "CA", "lexington": "KY",
    "stockton": "CA", "toledo": "OH", "st. paul": "MN", "newark": "NJ",
    "greensboro": "NC", "plano": "TX", "henderson": "NV", "lincoln": "NE",
    "buffalo": "NY", "jersey city": "NJ", "chula vista": "CA", "fort wayne": "IN",
    "orlando": "FL", "st. petersburg": "FL", "chandler": "AZ", "laredo": "TX",
    "norfolk": "VA", "durham": "NC", "madison": "WI", "lubbock": "TX",
    "irvine": "CA", "winston salem": "NC", "glendale": "AZ", "garland": "TX",
    "hialeah": "FL", "reno": "NV", "chesapeake": "VA", "gilbert": "AZ",
    "baton rouge": "LA", "irving": "TX", "scottsdale": "AZ", "north las vegas": "NV",
    "fremont": "CA", "boise": "ID", "richmond": "VA", "san bernardino": "CA",
    "birmingham": "AL", "spokane": "WA", "rochester": "NY", "des moines": "IA",
    "modesto": "CA", "fayetteville": "NC", "tacoma": "WA", "oxnard": "CA",
    "fontana": "CA", "montgomery": "AL", "moreno valley": "CA", "shreveport": "LA",
    "yonkers": "NY", "akron": "OH", "huntington beach": "CA", "grand rapids": "MI",
    "salt lake city": "UT", "tallahassee": "FL", "huntsville": "AL", "grand prairie": "TX",
    "worcester": "MA", "newport news": "VA", "brownsville": "TX", "overland park": "KS",
    "santa clarita": "CA", "providence": "RI", "garden grove": "CA", "oceanside": "CA",
    "jackson": "MS", "fort lauderdale": "FL", "santa rosa": "CA", "rancho cucamonga": "CA",
    "port st. lucie": "FL", "tempe": "AZ", "ontario": "CA", "vancouver": "WA",
    "sioux falls": "SD", "springfield": "MO", "peoria": "IL", "pembroke pines": "FL",
    "elk grove": "CA", "rockford": "IL", "palmdale": "CA", "corona": "CA",
    "salinas": "CA", "pomona": "CA", "pasadena": "CA", "joliet": "IL",
    "paterson": "NJ", "torrance": "CA", "bridgeport": "CT", "hayward": "CA",
    "sunnyvale": "CA", "escondido": "CA", "lakewood": "CO", "hollywood": "FL",
    "fort collins": "CO", "hampton": "VA", "thousand oaks": "CA", "west valley city": "UT",
    "boulder": "CO", "west covina": "CA", "ventura": "CA", "inland empire": "CA",
    "elgin": "IL", "richardson": "TX", "downey": "CA", "costa mesa": "CA",
    "miami gardens": "FL", "carlsbad": "CA", "westminster": "CO", "santa clara": "CA",
    "clearwater": "FL", "pearland": "TX", "concord": "CA", "topeka": "KS",
    "simi valley": "CA", "olathe": "KS", "thornton": "CO", "carrollton": "TX",
    "midland": "TX", "west palm beach": "FL", "cedar rapids": "IA", "elizabeth": "NJ",
    "round rock": "TX", "columbia": "SC", "sterling heights": "MI", "kent": "WA",
    "fargo": "ND", "palm bay": "FL", "pompano beach": "FL", "lancaster": "CA",
    "chico": "CA", "savannah": "GA", "mesquite": "TX", "rocky mount": "NC",
    "daly city": "CA", "santa monica": "CA", "burbank": "CA", "allen": "TX",
    "high point": "NC",
}


def parse_location(text: Optional[str]) -> Optional[ParsedLocation]:
    """Parse a free-text location. Returns None when nothing usable is found."""
    if not text or not isinstance(text, str):
        return None
    location = text.strip()
    if not location:
        return None

    zip_match = _ZIP_RE.search(location)
    if zip_match:
        return ParsedLocation(postal_code=zip_match.group(1))

    city_state = _CITY_STATE_RE.match(location)
    if city_state:
        return ParsedLocation(
            city=city_state.group(1).strip(),
            state=city_state.group(2).strip().upper(),
        )

    city_only = _CITY_ONLY_RE.match(location)
    if city_only:
        city = city_only.group(1).strip()
        state = CITY_STATES.get(city.lower())
        return ParsedLocation(city=city, state=state)

    return None


def require_location(text: Optional[str]) -> ParsedLocation:
    """Like parse_location, but raises LocationParseError instead of returning None."""
    parsed = parse_location(text)
    if parsed is None:
        raise LocationParseError(f"Could not understand location {text!r}")
    return parsed


def split_city_state(text: Optional[str], default_city: str, default_state: str) -> tuple[str, str]:
    """City/state label for display purposes (mock data, report titles)."""
    parsed = parse_location(text)
    if parsed is None or parsed.postal_code:
        return default_city, default_state
    return parsed.city or default_city, parsed.state or default_state
