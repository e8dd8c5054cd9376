import httpx
import pytest

from litterwarden.core.config import settings
from litterwarden.services import geocoding
from litterwarden.services.geocoding import LookupFailure, is_location_sentinel, reverse_geocode

GOOGLE_OK = {
    'status': 'OK',
    'results': [
        {
            'address_components': [
                {'long_name': 'London', 'types': ['postal_town']},
                {'long_name': 'Westminster', 'types': ['locality', 'political']},
                {'long_name': 'Greater London', 'types': ['administrative_area_level_2']},
                {'long_name': 'England', 'types': ['administrative_area_level_1']},
                {'long_name': 'United Kingdom', 'types': ['country', 'political']},
            ]
        }
    ],
}


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, 'GOOGLE_MAPS_API_KEY', 'maps-key')


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_lookup_without_key_is_skipped():
    lookup = reverse_geocode(51.5, -0.12)
    assert not lookup.ok
    assert lookup.failure is LookupFailure.SKIPPED
    assert lookup.as_fields() == {'town': 'Skipped', 'county': 'Skipped', 'country': 'Skipped'}


def test_lookup_parses_components(api_key):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen['params'] = dict(request.url.params)
        return httpx.Response(200, json=GOOGLE_OK)

    lookup = reverse_geocode(51.5, -0.12, client=_client(handler))
    assert lookup.ok
    assert lookup.as_fields() == {
        'town': 'Westminster',
        'county': 'Greater London',
        'country': 'United Kingdom',
    }
    assert seen['params'] == {'latlng': '51.5,-0.12', 'key': 'maps-key'}


def test_missing_components_default_to_unknown():
    lookup = geocoding.parse_address_components(
        [{'long_name': 'Wales', 'types': ['administrative_area_level_1']}]
    )
    assert lookup.as_fields() == {'town': 'Unknown', 'county': 'Wales', 'country': 'Unknown'}


def test_non_ok_status_is_lookup_failed(api_key):
    client = _client(lambda request: httpx.Response(200, json={'status': 'ZERO_RESULTS', 'results': []}))
    assert reverse_geocode(0.0, 0.0, client=client).failure is LookupFailure.LOOKUP_FAILED


def test_unparseable_body_is_lookup_failed(api_key):
    client = _client(lambda request: httpx.Response(502, text='<html>bad gateway</html>'))
    assert reverse_geocode(0.0, 0.0, client=client).failure is LookupFailure.LOOKUP_FAILED


def test_timeout_falls_back_to_skipped(api_key):
    def handler(request):
        raise httpx.ReadTimeout('slow', request=request)

    assert reverse_geocode(0.0, 0.0, client=_client(handler)).failure is LookupFailure.SKIPPED


def test_transport_error_is_network_error(api_key):
    def handler(request):
        raise httpx.ConnectError('down', request=request)

    lookup = reverse_geocode(0.0, 0.0, client=_client(handler))
    assert lookup.failure is LookupFailure.NETWORK_ERROR
    assert lookup.town == 'Network Error'


@pytest.mark.parametrize(
    'value, expected',
    [
        ('Lookup Failed', True),
        ('Network Error', True),
        ('Skipped', True),
        ('Error', True),
        ('Geocode Error', True),
        ('Unknown', False),
        ('Leeds', False),
        (None, False),
    ],
)
def test_is_location_sentinel(value, expected):
    assert is_location_sentinel(value) is expected


@pytest.mark.parametrize(
    'body',
    [
        {'status': 'OK', 'results': ['London']},
        {'status': 'OK', 'results': {'address_components': []}},
        {'status': 'OK', 'results': [{'address_components': 'London'}]},
        ['OK'],
    ],
)
def test_malformed_results_are_lookup_failures(api_key, body):
    lookup = reverse_geocode(51.5, -0.12, client=_client(lambda request: httpx.Response(200, json=body)))
    assert lookup.failure is LookupFailure.LOOKUP_FAILED


def test_malformed_components_are_skipped(api_key):
    body = {
        'status': 'OK',
        'results': [
            {
                'address_components': [
                    'Westminster',
                    {'long_name': 42, 'types': ['locality']},
                    {'long_name': 'France', 'types': 'country'},
                    {'long_name': 'United Kingdom', 'types': ['country']},
                ]
            }
        ],
    }
    lookup = reverse_geocode(51.5, -0.12, client=_client(lambda request: httpx.Response(200, json=body)))
    assert lookup.ok
    assert lookup.as_fields() == {'town': 'Unknown', 'county': 'Unknown', 'country': 'United Kingdom'}
