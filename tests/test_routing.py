import httpx
import pytest

from src.app.services.geospatial import haversine_km
from src.app.services.routing import OSRMClient, trip_route

MERCHANT = (14.5995, 120.9842)
CUSTOMER = (14.6760, 121.0437)


def _client(handler) -> OSRMClient:
    return OSRMClient(
        base_url="http://osrm.test/",
        max_retries=1,
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
    )


def test_osrm_route_request_and_parsing():
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["overview"] = request.url.params.get("overview")
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 12345.0, "duration": 900.0}]})

    route = trip_route(MERCHANT, CUSTOMER, client=_client(handler))

    assert captured == {
        "path": "/route/v1/driving/120.9842,14.5995;121.0437,14.676",
        "overview": "false",
    }
    assert route.distance_km == pytest.approx(12.345)
    assert route.duration_seconds == 900.0
    assert route.source == "osrm"


def test_unconfigured_routing_uses_straight_line(monkeypatch: pytest.MonkeyPatch):
    from src.app.config import settings

    monkeypatch.setattr(settings, "osrm_base_url", None)

    route = trip_route(MERCHANT, CUSTOMER)

    assert route.distance_km == pytest.approx(haversine_km(*MERCHANT, *CUSTOMER))
    assert route.duration_seconds is None
    assert route.source == "straight_line"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"code": "NoRoute", "routes": []}),
        httpx.Response(200, json={"code": "Ok", "routes": [{"weight": 1}]}),
    ],
)
def test_routing_failure_falls_back_to_straight_line(response, caplog):
    route = trip_route(MERCHANT, CUSTOMER, client=_client(lambda request: response))

    assert route.source == "straight_line"
    assert route.duration_seconds is None
    assert 10 < route.distance_km < 11
    assert "using straight-line distance" in caplog.text


def test_network_errors_are_retried_then_fall_back():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    route = trip_route(MERCHANT, CUSTOMER, client=_client(handler))

    assert len(calls) == 2
    assert route.source == "straight_line"


def test_network_error_recovers_on_retry():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, json={"code": "Ok", "routes": [{"distance": 5000.0, "duration": 420.0}]})

    route = trip_route(MERCHANT, CUSTOMER, client=_client(handler))

    assert route.distance_km == 5.0
    assert route.source == "osrm"


def test_osrm_client_requires_base_url(monkeypatch: pytest.MonkeyPatch):
    from src.app.config import settings

    monkeypatch.setattr(settings, "osrm_base_url", None)

    with pytest.raises(ValueError):
        OSRMClient()
