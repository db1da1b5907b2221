import httpx
import pytest

from fleetroute.errors import GatewayUnavailable, NoRouteFound, WeatherUnavailable
from fleetroute.models.domain import Coordinate
from fleetroute.services.routing.google_client import GoogleMapsClient, strip_html
from fleetroute.services.routing.osrm_client import OSRMClient, build_coordinate_string, describe_step
from fleetroute.services.weather.client import OpenWeatherClient

ORIGIN = Coordinate(21.5, 39.2)
DESTINATION = Coordinate(21.6, 39.3)

DIRECTIONS_OK = {
    "status": "OK",
    "routes": [
        {
            "overview_polyline": {"points": "_p~iF~ps|U"},
            "waypoint_order": [1, 0],
            "legs": [
                {
                    "distance": {"value": 1200},
                    "duration": {"value": 300},
                    "duration_in_traffic": {"value": 360},
                    "steps": [{"html_instructions": "Turn <b>left</b> onto <b>King&nbsp;Rd</b>"}],
                },
                {
                    "distance": {"value": 800},
                    "duration": {"value": 200},
                    "duration_in_traffic": {"value": 260},
                    "steps": [],
                },
                {
                    "distance": {"value": 1000},
                    "duration": {"value": 100},
                    "duration_in_traffic": {"value": 100},
                    "steps": [],
                },
            ],
        }
    ],
}


def _google(handler, **kwargs):
    return GoogleMapsClient(
        api_key="test-key",
        base_url="https://maps.test/api",
        max_retries=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_strip_html():
    assert strip_html("Turn <b>left</b> onto <b>King&nbsp;Rd</b>") == "Turn left onto King Rd"
    assert strip_html("Head <b>north</b><div>Toll road</div>") == "Head north Toll road"


def test_google_directions_are_parsed():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=DIRECTIONS_OK)

    client = _google(handler)
    result = client.route(
        ORIGIN,
        DESTINATION,
        [Coordinate(21.52, 39.22), Coordinate(21.55, 39.25)],
        optimize_waypoints=True,
        avoid_tolls=True,
        use_traffic_model=True,
    )

    assert result.distance_meters == 3000
    assert result.duration_seconds == 600
    assert result.duration_in_traffic_seconds == 720
    assert result.has_traffic
    assert result.waypoint_order == [1, 0]
    assert result.polyline == "_p~iF~ps|U"
    assert result.instructions == ["Turn left onto King Rd"]

    params = seen[0].url.params
    assert seen[0].url.path == "/api/directions/json"
    assert params["waypoints"].startswith("optimize:true|")
    assert params["waypoints"].count("|") == 2
    assert params["avoid"] == "tolls"
    assert params["departure_time"] == "now"
    assert params["key"] == "test-key"


def test_google_without_optimization_sends_plain_waypoints():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=DIRECTIONS_OK)

    _google(handler).route(ORIGIN, DESTINATION, [Coordinate(21.52, 39.22)])

    params = seen[0].url.params
    assert "optimize:true" not in params["waypoints"]
    assert "avoid" not in params
    assert "departure_time" not in params


def test_google_zero_results_is_no_route():
    client = _google(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "routes": []}))

    with pytest.raises(NoRouteFound):
        client.route(ORIGIN, DESTINATION)


def test_google_denied_request_is_gateway_error():
    client = _google(
        lambda request: httpx.Response(200, json={"status": "REQUEST_DENIED", "error_message": "bad key"})
    )

    with pytest.raises(GatewayUnavailable, match="bad key"):
        client.route(ORIGIN, DESTINATION)


def test_google_http_error_is_gateway_error():
    client = _google(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(GatewayUnavailable):
        client.route(ORIGIN, DESTINATION)


def test_google_timeout_is_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GatewayUnavailable):
        _google(handler).route(ORIGIN, DESTINATION)


def test_google_nearby_places():
    seen = []
    payload = {
        "status": "OK",
        "results": [
            {
                "place_id": "p1",
                "name": "Station One",
                "rating": 4.2,
                "geometry": {"location": {"lat": 21.55, "lng": 39.25}},
            },
            {"place_id": "p2", "name": "Nowhere", "geometry": {}},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    places = _google(handler).nearby(ORIGIN, 50_000, "gas_station")

    assert [place.id for place in places] == ["p1"]
    assert places[0].coordinate == Coordinate(21.55, 39.25)
    assert places[0].rating == pytest.approx(4.2)
    assert seen[0].url.params["type"] == "gas_station"
    assert seen[0].url.params["radius"] == "50000"


def test_google_nearby_with_no_results():
    client = _google(lambda request: httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []}))

    assert client.nearby(ORIGIN, 1000, "gas_station") == []


def test_osrm_coordinate_string_is_lon_lat():
    assert build_coordinate_string([Coordinate(1.5, 2.5), Coordinate(3.0, 4.0)]) == "2.5,1.5;4.0,3.0"


def test_describe_step():
    step = {"maneuver": {"type": "turn", "modifier": "left"}, "name": "King Rd"}
    assert describe_step(step) == "Turn left onto King Rd"
    assert describe_step({"maneuver": {"type": "arrive"}}) == "Arrive"


def test_osrm_trip_reports_waypoint_order():
    seen = []
    payload = {
        "code": "Ok",
        "trips": [
            {
                "geometry": "_p~iF~ps|U",
                "legs": [
                    {"distance": 1000.4, "duration": 100.6, "steps": []},
                    {"distance": 500.0, "duration": 50.0, "steps": []},
                    {"distance": 700.0, "duration": 70.0, "steps": []},
                ],
            }
        ],
        "waypoints": [
            {"waypoint_index": 0},
            {"waypoint_index": 2},
            {"waypoint_index": 1},
            {"waypoint_index": 3},
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    client = OSRMClient(base_url="https://osrm.test", profile="driving", transport=httpx.MockTransport(handler))
    result = client.route(
        ORIGIN,
        DESTINATION,
        [Coordinate(21.52, 39.22), Coordinate(21.55, 39.25)],
        optimize_waypoints=True,
    )

    assert result.waypoint_order == [1, 0]
    assert result.distance_meters == 2200
    assert result.duration_seconds == 221
    assert not result.has_traffic
    assert seen[0].url.path.startswith("/trip/v1/driving/")
    assert seen[0].url.params["source"] == "first"
    assert seen[0].url.params["roundtrip"] == "false"


def test_osrm_no_route_code():
    client = OSRMClient(
        base_url="https://osrm.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"code": "NoRoute"})),
    )

    with pytest.raises(NoRouteFound):
        client.route(ORIGIN, DESTINATION)


def test_openweather_current_conditions():
    seen = []
    payload = {
        "main": {"temp": 29.5, "humidity": 70},
        "wind": {"speed": 5.0},
        "visibility": 8000,
        "weather": [{"main": "Rain"}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    client = OpenWeatherClient(
        api_key="weather-key",
        base_url="https://weather.test/data/2.5",
        transport=httpx.MockTransport(handler),
    )
    reading = client.current(ORIGIN)

    assert reading.temperature_c == pytest.approx(29.5)
    assert reading.humidity_pct == pytest.approx(70.0)
    assert reading.wind_speed_kmh == pytest.approx(18.0)
    assert reading.visibility_meters == pytest.approx(8000.0)
    assert reading.condition_label == "rain"
    assert seen[0].url.params["units"] == "metric"


def test_openweather_errors_are_weather_unavailable():
    client = OpenWeatherClient(
        api_key="weather-key",
        max_retries=0,
        transport=httpx.MockTransport(lambda request: httpx.Response(503)),
    )

    with pytest.raises(WeatherUnavailable):
        client.current(ORIGIN)


def test_openweather_malformed_payload():
    client = OpenWeatherClient(
        api_key="weather-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"weather": []})),
    )

    with pytest.raises(WeatherUnavailable):
        client.current(ORIGIN)


def test_clients_require_configuration(monkeypatch: pytest.MonkeyPatch):
    from fleetroute.config import settings

    monkeypatch.setattr(settings, "google_maps_api_key", None)
    monkeypatch.setattr(settings, "openweather_api_key", None)
    monkeypatch.setattr(settings, "osrm_base_url", None)

    with pytest.raises(ValueError):
        GoogleMapsClient()
    with pytest.raises(ValueError):
        OpenWeatherClient()
    with pytest.raises(ValueError):
        OSRMClient()


def test_google_refuses_too_many_waypoints():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=DIRECTIONS_OK)

    waypoints = [Coordinate(21.5 + i * 0.001, 39.2) for i in range(26)]

    with pytest.raises(GatewayUnavailable, match="at most 25 waypoints"):
        _google(handler).route(ORIGIN, DESTINATION, waypoints)
    assert seen == []


def test_openweather_unexpected_condition_shape():
    payload = {"main": {"temp": 20.0}, "weather": ["Rain"]}
    client = OpenWeatherClient(
        api_key="weather-key",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
    )

    with pytest.raises(WeatherUnavailable):
        client.current(ORIGIN)
