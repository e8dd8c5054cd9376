"""Reverse geocoding of report coordinates.

Lookups never raise. A failed lookup comes back as a ``LocationLookup`` carrying a
``LookupFailure`` reason; callers turn that into the sentinel strings stored on the
report with ``as_fields()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
from loguru import logger

from litterwarden.core.config import settings
from litterwarden.models.report import UNKNOWN_LOCATION
from litterwarden.services.http_client import enrichment_client

LOCATION_FIELDS = ('town', 'county', 'country')


class LookupFailure(str, Enum):
    SKIPPED = 'Skipped'
    LOOKUP_FAILED = 'Lookup Failed'
    NETWORK_ERROR = 'Network Error'


LOCATION_SENTINELS = frozenset(item.value for item in LookupFailure)


def is_location_sentinel(value: str | None) -> bool:
    """True for stored failure markers, including legacy values such as ``Error``."""
    if not value:
        return False
    # Older rows stored free-form error text, so any value containing "Error" is retried.
    return value in LOCATION_SENTINELS or 'Error' in value


@dataclass(frozen=True)
class LocationLookup:
    town: str = UNKNOWN_LOCATION
    county: str = UNKNOWN_LOCATION
    country: str = UNKNOWN_LOCATION
    failure: LookupFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def failed(cls, failure: LookupFailure) -> LocationLookup:
        return cls(failure.value, failure.value, failure.value, failure)

    def as_fields(self) -> dict[str, str]:
        return {'town': self.town, 'county': self.county, 'country': self.country}


def parse_address_components(components: list[dict[str, Any]]) -> LocationLookup:
    town = county = country = None
    for component in components:
        if not isinstance(component, dict):
            continue
        types = component.get('types')
        name = component.get('long_name')
        if not isinstance(types, list) or not isinstance(name, str):
            continue
        if 'locality' in types:
            town = name
        elif 'postal_town' in types and not town:
            town = name
        elif 'administrative_area_level_2' in types:
            county = name
        elif 'administrative_area_level_1' in types and not county:
            county = name
        elif 'country' in types:
            country = name
    return LocationLookup(
        town=town or UNKNOWN_LOCATION,
        county=county or UNKNOWN_LOCATION,
        country=country or UNKNOWN_LOCATION,
    )


def reverse_geocode(
    latitude: float,
    longitude: float,
    client: httpx.Client | None = None,
) -> LocationLookup:
    api_key = settings.GOOGLE_MAPS_API_KEY
    if not api_key:
        logger.warning('geocode.skipped', reason='missing_api_key')
        return LocationLookup.failed(LookupFailure.SKIPPED)

    params = {'latlng': f'{latitude},{longitude}', 'key': api_key}
    try:
        with enrichment_client(client) as http:
            response = http.get(settings.GEOCODING_URL, params=params)
        payload = response.json()
    except httpx.TimeoutException:
        logger.warning('geocode.timeout', latitude=latitude, longitude=longitude)
        return LocationLookup.failed(LookupFailure.SKIPPED)
    except httpx.HTTPError as exc:
        logger.error('geocode.transport_error', error=str(exc))
        return LocationLookup.failed(LookupFailure.NETWORK_ERROR)
    except ValueError:
        logger.error('geocode.invalid_response')
        return LocationLookup.failed(LookupFailure.LOOKUP_FAILED)

    status = payload.get('status') if isinstance(payload, dict) else None
    results = payload.get('results') if isinstance(payload, dict) else None
    first = results[0] if isinstance(results, list) and results else None
    components = first.get('address_components') if isinstance(first, dict) else None
    if status != 'OK' or not isinstance(components, list) or not components:
        logger.warning('geocode.lookup_failed', status=status)
        return LocationLookup.failed(LookupFailure.LOOKUP_FAILED)

    lookup = parse_address_components(components)
    logger.debug('geocode.resolved', **lookup.as_fields())
    return lookup
