import logging
import math
import re
from typing import Any

from app.config import settings
from app.errors import AddressNotFound, AmbiguousLocation, InvalidCoordinates
from app.models.address import UNKNOWN, ResolvedAddress
from app.services.http import get_json

logger = logging.getLogger(__name__)

_CA_POSTAL_CODE = re.compile(r"^[A-Za-z]\d[A-Za-z] ?\d[A-Za-z]\d$")

# First non-empty key wins. "suburb" is a fallback for both city and neighbourhood.
CITY_KEYS = ("city", "town", "village", "locality", "suburb")
REGION_KEYS = ("region", "state", "province")
NEIGHBOURHOOD_KEYS = ("neighbourhood", "neighborhood", "quarter", "suburb")
POSTCODE_KEYS = ("postcode", "postal_code")
COUNTRY_KEYS = ("country",)
LABEL_KEYS = ("label", "formatted", "display_name", "name")
LATITUDE_KEYS = ("latitude", "lat")
LONGITUDE_KEYS = ("longitude", "lon", "lng")

_NESTED_KEYS = ("components", "address")


def normalize_query(query: str) -> str:
    """Append the country suffix to postal codes and comma-less queries."""
    q = query.strip()
    if _CA_POSTAL_CODE.match(q) or "," not in q:
        return f"{q}, {settings.country_suffix}"
    return q


def _first_text(doc: dict[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = doc.get(key)
        if isinstance(value, (str, int)) and not isinstance(value, bool) and str(value).strip():
            return str(value).strip()
    return UNKNOWN


def _first_coordinate(doc: dict[str, Any], keys: tuple[str, ...]) -> float:
    raw = next((doc[k] for k in keys if doc.get(k) is not None), None)
    if raw is None or isinstance(raw, bool):
        raise InvalidCoordinates()
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinates() from exc
    if not math.isfinite(value):
        raise InvalidCoordinates()
    return value


def _candidates(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        docs = data
    elif isinstance(data, dict):
        docs = data.get("data") or data.get("results") or []
    else:
        docs = []
    return [d for d in docs if isinstance(d, dict)]


def _flatten(doc: dict[str, Any]) -> dict[str, Any]:
    """Merge nested address components under the top-level keys."""
    flat: dict[str, Any] = {}
    for nested in _NESTED_KEYS:
        if isinstance(doc.get(nested), dict):
            flat.update(doc[nested])
    geometry = doc.get("geometry")
    if isinstance(geometry, dict):
        flat.update({k: v for k, v in geometry.items() if k in ("lat", "lng")})
    flat.update({k: v for k, v in doc.items() if v is not None and not isinstance(v, dict)})
    return flat


def parse_candidate(doc: dict[str, Any]) -> ResolvedAddress:
    flat = _flatten(doc)

    latitude = _first_coordinate(flat, LATITUDE_KEYS)
    longitude = _first_coordinate(flat, LONGITUDE_KEYS)

    city = _first_text(flat, CITY_KEYS)
    region = _first_text(flat, REGION_KEYS)
    if city == UNKNOWN and region == UNKNOWN:
        raise AmbiguousLocation()

    return ResolvedAddress(
        label=_first_text(flat, LABEL_KEYS),
        latitude=latitude,
        longitude=longitude,
        country=_first_text(flat, COUNTRY_KEYS),
        region=region,
        city=city,
        neighbourhood=_first_text(flat, NEIGHBOURHOOD_KEYS),
        postcode=_first_text(flat, POSTCODE_KEYS),
    )


async def resolve(query: str) -> ResolvedAddress:
    normalized = normalize_query(query)
    data = await get_json(
        settings.geocoding_endpoint,
        params={
            settings.geocoding_key_param: settings.geocoding_api_key,
            settings.geocoding_query_param: normalized,
            "limit": 1,
        },
        provider="Geocoding service",
    )

    docs = _candidates(data)
    if not docs:
        logger.info("geocode not_found query=%s", normalized)
        raise AddressNotFound()

    resolved = parse_candidate(docs[0])
    logger.info(
        "geocode resolved query=%s region=%s city=%s",
        normalized,
        resolved.region,
        resolved.city,
    )
    return resolved
