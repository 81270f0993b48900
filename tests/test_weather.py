"""
Tests for WeatherClient and the response decoders
"""

from datetime import date, datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from shared import CurrentWeather, WeatherQuery, parse_daily
from weather import WeatherClient


def make_response(payload=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestWeatherQuery:
    """Test request parameter construction"""

    def test_params(self, coordinate):
        params = dict(WeatherQuery(coordinate).to_params())
        assert params["latitude"] == "39.36667"
        assert params["longitude"] == "-0.41667"
        assert params["hourly"] == (
            "temperature_2m,relativehumidity_2m,dewpoint_2m,apparent_temperature,"
            "precipitation_probability,weathercode,pressure_msl,surface_pressure,"
            "cloudcover,visibility,evapotranspiration,windspeed_10m"
        )
        assert params["daily"] == (
            "weathercode,temperature_2m_max,temperature_2m_min,sunrise,sunset,uv_index_max"
        )
        assert params["current_weather"] == "true"
        assert params["timezone"] == "Europe/Madrid"

    def test_param_order(self, coordinate):
        names = [name for name, _ in WeatherQuery(coordinate).to_params()]
        assert names == [
            "latitude", "longitude", "hourly", "daily", "current_weather", "timezone"
        ]


class TestWeatherClient:
    """Test fetching and snapshot handling"""

    @pytest.fixture
    def client(self, coordinate):
        return WeatherClient(coordinate)

    def test_new_client_has_no_data(self, client):
        assert client.snapshot is None
        assert client.current_weather() is None
        assert client.daily_forecast() is None

    def test_refresh_success(self, client, forecast):
        with patch.object(client.session, "get", return_value=make_response(forecast)) as mock_get:
            client.refresh()

        mock_get.assert_called_once_with(
            "https://api.open-meteo.com/v1/forecast",
            params=client.query.to_params(),
            timeout=WeatherClient.REQUEST_TIMEOUT,
        )
        assert client.snapshot == forecast

    def test_session_headers(self, client):
        assert client.session.headers["Accept"] == "application/json"
        assert client.session.headers["User-Agent"] == WeatherClient.USER_AGENT

    def test_transport_failure_clears_snapshot(self, client, forecast):
        client.apply(forecast)
        assert client.current_weather() is not None

        with patch.object(client.session, "get", side_effect=requests.ConnectionError("down")):
            client.refresh()

        assert client.snapshot is None
        assert client.current_weather() is None
        assert client.daily_forecast() is None

    def test_timeout_clears_snapshot(self, client, forecast):
        client.apply(forecast)
        with patch.object(client.session, "get", side_effect=requests.Timeout("slow")):
            client.refresh()
        assert client.snapshot is None

    def test_http_error_clears_snapshot(self, client, forecast):
        client.apply(forecast)
        with patch.object(client.session, "get", return_value=make_response(status_code=500)):
            client.refresh()
        assert client.snapshot is None

    def test_invalid_json_clears_snapshot(self, client, forecast):
        client.apply(forecast)
        response = make_response(json_error=ValueError("Expecting value"))
        with patch.object(client.session, "get", return_value=response):
            client.refresh()
        assert client.snapshot is None

    def test_non_object_json(self, client):
        with patch.object(client.session, "get", return_value=make_response([1, 2, 3])):
            assert client.fetch() is None

    def test_fetch_does_not_touch_snapshot(self, client, forecast):
        with patch.object(client.session, "get", return_value=make_response(forecast)):
            assert client.fetch() == forecast
        assert client.snapshot is None

    def test_refresh_is_repeatable(self, client, forecast):
        second = dict(forecast, current_weather=dict(forecast["current_weather"], weathercode=2))
        responses = [make_response(forecast), make_response(second)]
        with patch.object(client.session, "get", side_effect=responses) as mock_get:
            client.refresh()
            client.refresh()
        assert mock_get.call_count == 2
        assert client.current_weather().weathercode == 2


class TestCurrentWeather:
    """Test decoding of current conditions"""

    def test_decode(self, coordinate, forecast):
        client = WeatherClient(coordinate)
        client.apply(forecast)
        current = client.current_weather()
        assert current == CurrentWeather(
            temperature=21.4, windspeed=11.2, winddirection=270, weathercode=61, is_day=1
        )

    @pytest.mark.parametrize(
        "code, description",
        [
            (61, "Rain: Slight, moderate and heavy intensity"),
            (96, "Thunderstorm with slight and heavy hail"),
            (2, "Mainly clear, partly cloudy, and overcast"),
        ],
    )
    def test_description_from_response(self, coordinate, forecast, code, description):
        forecast["current_weather"]["weathercode"] = code
        client = WeatherClient(coordinate)
        client.apply(forecast)
        _, text = client.current_weather().icon_and_description()
        assert text == description

    def test_missing_key(self, coordinate, forecast):
        del forecast["current_weather"]
        client = WeatherClient(coordinate)
        client.apply(forecast)
        assert client.current_weather() is None

    @pytest.mark.parametrize("field", ["temperature", "windspeed", "winddirection", "weathercode", "is_day"])
    def test_missing_field(self, forecast, field):
        del forecast["current_weather"][field]
        assert CurrentWeather.from_dict(forecast["current_weather"]) is None

    @pytest.mark.parametrize(
        "field, value",
        [
            ("temperature", "21.4"),
            ("windspeed", None),
            ("winddirection", 270.5),
            ("weathercode", True),
            ("is_day", "1"),
        ],
    )
    def test_mistyped_field(self, forecast, field, value):
        forecast["current_weather"][field] = value
        assert CurrentWeather.from_dict(forecast["current_weather"]) is None

    def test_integral_float_accepted(self, forecast):
        forecast["current_weather"]["winddirection"] = 270.0
        current = CurrentWeather.from_dict(forecast["current_weather"])
        assert current.winddirection == 270
        assert isinstance(current.winddirection, int)

    def test_not_an_object(self):
        assert CurrentWeather.from_dict([21.4, 11.2]) is None
        assert CurrentWeather.from_dict(None) is None


class TestDailyForecast:
    """Test decoding of the positional daily arrays"""

    def test_decode(self, forecast):
        entries = parse_daily(forecast["daily"])
        assert [entry.date for entry in entries] == [
            date(2023, 6, 1), date(2023, 6, 2), date(2023, 6, 3)
        ]
        first = entries[0]
        assert first.temperature_min == 15.2
        assert first.temperature_max == 24.1
        assert first.weathercode == 61
        assert first.sunrise == datetime(2023, 6, 1, 6, 35)
        assert first.sunset == datetime(2023, 6, 1, 21, 17)
        assert first.uv_index_max == 7.35
        assert first.precipitation_probability_max is None

    def test_via_client(self, coordinate, forecast):
        client = WeatherClient(coordinate)
        client.apply(forecast)
        assert len(client.daily_forecast()) == 3

    def test_precipitation_probability(self, forecast):
        forecast["daily"]["precipitation_probability_max"] = [80, 45, 0]
        entries = parse_daily(forecast["daily"])
        assert [entry.precipitation_probability_max for entry in entries] == [80, 45, 0]

    def test_bad_date_skips_entry(self, forecast):
        forecast["daily"]["time"][1] = "not-a-date"
        entries = parse_daily(forecast["daily"])
        assert [entry.date for entry in entries] == [date(2023, 6, 1), date(2023, 6, 3)]

    def test_bad_timestamp_skips_entry(self, forecast):
        forecast["daily"]["sunset"][0] = "21:17"
        entries = parse_daily(forecast["daily"])
        assert [entry.date for entry in entries] == [date(2023, 6, 2), date(2023, 6, 3)]

    def test_null_value_skips_entry(self, forecast):
        forecast["daily"]["uv_index_max"][2] = None
        entries = parse_daily(forecast["daily"])
        assert len(entries) == 2

    def test_short_array_skips_missing_days(self, forecast):
        forecast["daily"]["sunrise"] = forecast["daily"]["sunrise"][:2]
        entries = parse_daily(forecast["daily"])
        assert [entry.date for entry in entries] == [date(2023, 6, 1), date(2023, 6, 2)]

    def test_sorted_by_date(self, forecast):
        for values in forecast["daily"].values():
            values.reverse()
        entries = parse_daily(forecast["daily"])
        assert [entry.date for entry in entries] == sorted(entry.date for entry in entries)
        assert entries[0].weathercode == 61

    def test_missing_daily(self, coordinate, forecast):
        del forecast["daily"]
        client = WeatherClient(coordinate)
        client.apply(forecast)
        assert client.daily_forecast() is None
        assert client.current_weather() is not None

    def test_missing_array(self, forecast):
        del forecast["daily"]["sunrise"]
        assert parse_daily(forecast["daily"]) is None

    def test_empty_arrays(self, forecast):
        for key in forecast["daily"]:
            forecast["daily"][key] = []
        assert parse_daily(forecast["daily"]) == []
