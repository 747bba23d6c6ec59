import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from src.core.config import settings
from src.core.exceptions import UpstreamError
from src.services.geocoding_service import (
    extract_center,
    geocode_candidates,
    geocode_confidence,
    normalize_bbox,
    resolve_destination_bbox,
)
from src.utils.common import _raise_for_upstream_status

LISBON_BBOX = [-9.5, 38.6, -9.0, 38.8]


def test_geocode_confidence_uses_relevance():
    assert geocode_confidence({"relevance": 0.9, "place_type": ["poi"]}) == 0.9
    assert geocode_confidence({"relevance": 1.7}) == 1.0
    assert geocode_confidence({"relevance": -0.2}) == 0.0


def test_geocode_confidence_heuristic_by_type():
    assert geocode_confidence({"place_type": ["poi"]}) == 0.78
    assert geocode_confidence({"place_type": ["neighborhood"]}) == 0.72
    assert geocode_confidence({"place_type": ["address"]}) == 0.65
    assert geocode_confidence({}) == 0.65


def test_extract_center():
    assert extract_center({"center": [-9.2, 38.7]}) == (-9.2, 38.7)
    assert extract_center({"center": [-9.2]}) is None
    assert extract_center({"center": [-9.2, "38.7"]}) is None
    assert extract_center({"center": [float("nan"), 38.7]}) is None
    assert extract_center(None) is None


def test_normalize_bbox():
    assert normalize_bbox(LISBON_BBOX) == LISBON_BBOX
    assert normalize_bbox([1, 2, 3]) is None
    assert normalize_bbox(None) is None


def test_raise_for_upstream_status_includes_body():
    request = httpx.Request("GET", "https://api.mapbox.com/geocoding/v5/mapbox.places/x.json")
    response = httpx.Response(401, text="Not Authorized - Invalid Token", request=request)
    with pytest.raises(UpstreamError) as exc_info:
        _raise_for_upstream_status(response, "Mapbox geocode")
    assert exc_info.value.message == "Mapbox geocode error (401): Not Authorized - Invalid Token"
    assert exc_info.value.upstream_status == 401


def test_raise_for_upstream_status_falls_back_to_reason():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(503, request=request)
    with pytest.raises(UpstreamError) as exc_info:
        _raise_for_upstream_status(response, "OpenAI")
    assert exc_info.value.message == "OpenAI error (503): Service Unavailable"


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_resolve_destination_bbox(mock_get):
    mock_get.return_value = {"features": [{"center": [-9.1, 38.7], "bbox": LISBON_BBOX}]}

    assert asyncio.run(resolve_destination_bbox("Lisbon")) == LISBON_BBOX

    url = mock_get.call_args.args[0]
    params = mock_get.call_args.kwargs["params"]
    assert url.endswith("/Lisbon.json")
    assert params["types"] == "place,region,country"
    assert params["limit"] == "1"
    assert params["autocomplete"] == "false"
    assert params["access_token"] == "pk.test-token"
    assert "bbox" not in params


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_resolve_destination_without_bbox(mock_get):
    mock_get.return_value = {"features": [{"center": [-9.1, 38.7]}]}
    assert asyncio.run(resolve_destination_bbox("Lisbon")) is None

    mock_get.return_value = {"features": []}
    assert asyncio.run(resolve_destination_bbox("Lisbon")) is None


def _feature_for(query_map):
    def fake_get(url, params=None, **kwargs):
        for name, feature in query_map.items():
            if name in url:
                return {"features": [feature] if feature else []}
        return {"features": []}
    return fake_get


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_scopes_query_and_drops_misses(mock_get):
    mock_get.side_effect = _feature_for({
        "Alfama": {"center": [-9.13, 38.71], "place_type": ["neighborhood"]},
        "Atlantis": None,
        "LX": {"center": [-9.17, 38.70], "relevance": 0.95, "place_type": ["poi"]},
    })
    candidates = [{"name": "Alfama"}, {"name": "Atlantis"}, {"name": "LX Factory"}]

    places = asyncio.run(geocode_candidates(candidates, "Lisbon", LISBON_BBOX, 15))

    assert [p.name for p in places] == ["Alfama", "LX Factory"]
    assert places[0].confidence == 0.72
    assert places[1].confidence == 0.95
    assert places[0].lat == 38.71 and places[0].lng == -9.13

    first_url = mock_get.call_args_list[0].args[0]
    first_params = mock_get.call_args_list[0].kwargs["params"]
    assert first_url.endswith("/Alfama%2C%20Lisbon.json")
    assert first_params["types"] == "poi,neighborhood,place,address"
    assert first_params["bbox"] == "-9.5,38.6,-9.0,38.8"


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_limits_and_skips_blank_names(mock_get):
    mock_get.return_value = {"features": [{"center": [1.0, 2.0]}]}
    candidates = [{"name": "  "}, "junk", {"name": "A"}, {"name": "B"}, {"name": "C"}]

    places = asyncio.run(geocode_candidates(candidates, "Nowhere", None, 4))

    assert [p.name for p in places] == ["A", "B"]
    assert mock_get.call_count == 2
    assert "bbox" not in mock_get.call_args.kwargs["params"]


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_concurrent_keeps_candidate_order(mock_get, monkeypatch):
    monkeypatch.setattr(settings, "GEOCODE_CONCURRENCY", 3)
    delays = {"First": 0.03, "Second": 0.01, "Third": 0.0}

    async def fake_get(url, params=None, **kwargs):
        name = next(key for key in delays if key in url)
        await asyncio.sleep(delays[name])
        return {"features": [{"center": [0.0, 0.0], "place_type": ["poi"]}]}

    mock_get.side_effect = fake_get
    candidates = [{"name": "First"}, {"name": "Second"}, {"name": "Third"}]

    places = asyncio.run(geocode_candidates(candidates, "X", None, 15))
    assert [p.name for p in places] == ["First", "Second", "Third"]


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_upstream_error_aborts(mock_get):
    mock_get.side_effect = UpstreamError("Mapbox geocode error (429): Too Many Requests", upstream_status=429)
    with pytest.raises(UpstreamError):
        asyncio.run(geocode_candidates([{"name": "Alfama"}], "Lisbon", None, 15))


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_sequential_stops_at_first_error(mock_get):
    mock_get.side_effect = UpstreamError("Mapbox geocode error (401): Not Authorized - Invalid Token", upstream_status=401)
    candidates = [{"name": f"Spot {i}"} for i in range(5)]

    with pytest.raises(UpstreamError):
        asyncio.run(geocode_candidates(candidates, "Lisbon", None, 15))

    assert mock_get.call_count == 1


@patch("src.services.geocoding_service.http_get_json", new_callable=AsyncMock)
def test_geocode_candidates_concurrent_cancels_pending_on_error(mock_get, monkeypatch):
    monkeypatch.setattr(settings, "GEOCODE_CONCURRENCY", 3)
    finished = []

    async def fake_get(url, params=None, **kwargs):
        if "Spot%200" in url:
            raise UpstreamError("Mapbox geocode error (429): Too Many Requests", upstream_status=429)
        await asyncio.sleep(5)
        finished.append(url)
        return {"features": []}

    mock_get.side_effect = fake_get
    candidates = [{"name": f"Spot {i}"} for i in range(5)]

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(geocode_candidates(candidates, "Lisbon", None, 15))

    assert exc_info.value.upstream_status == 429
    # 세마포어 안에서 시작된 3건만 호출되고, 나머지는 취소됨
    assert mock_get.call_count == 3
    assert finished == []
