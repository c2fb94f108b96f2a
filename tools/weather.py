from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from core import http
from core.config import FORECAST_ENDPOINT, GEOCODING_ENDPOINT
from core.errors import InputError, UpstreamError

from .registry import ToolName, ToolSpec

logger = logging.getLogger(__name__)

# WMO weather interpretation codes
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}

DEFAULT_UNITS = {
    "temperature": "°C",
    "humidity": "%",
    "windSpeed": "km/h",
    "precipitation": "mm",
}

CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,wind_speed_10m,weather_code"
DAILY_FIELDS = "weather_code,temperature_2m_max,temperature_2m_min,precipitation_sum"


def describe(code: Any) -> str:
    return WEATHER_CODES.get(code, "Unknown")


def _units(data: Dict[str, Any]) -> Dict[str, str]:
    current = data.get("current_units") or {}
    daily = data.get("daily_units") or {}
    return {
        "temperature": current.get("temperature_2m") or DEFAULT_UNITS["temperature"],
        "humidity": current.get("relative_humidity_2m") or DEFAULT_UNITS["humidity"],
        "windSpeed": current.get("wind_speed_10m") or DEFAULT_UNITS["windSpeed"],
        "precipitation": daily.get("precipitation_sum") or DEFAULT_UNITS["precipitation"],
    }


def _daily(daily: Dict[str, Any]) -> List[Dict[str, Any]]:
    dates = daily.get("time") or []

    def col(key: str, i: int) -> Any:
        values = daily.get(key) or []
        return values[i] if i < len(values) else None

    return [
        {
            "date": date,
            "maxTemperature": col("temperature_2m_max", i),
            "minTemperature": col("temperature_2m_min", i),
            "precipitationSum": col("precipitation_sum", i),
            "weatherCode": col("weather_code", i),
            "weatherDescription": describe(col("weather_code", i)),
        }
        for i, date in enumerate(dates)
    ]


async def geocode(location: str) -> Dict[str, Any]:
    data = await http.get_json(
        GEOCODING_ENDPOINT,
        {"name": location, "count": 1, "language": "en", "format": "json"},
        label="Geocoding request",
    )
    matches = (data or {}).get("results") or []
    if not matches:
        raise InputError(f"Location not found: {location}", code=404)
    return matches[0]


async def get_weather(params: Mapping[str, Any]) -> dict:
    location = params.get("location")
    if not isinstance(location, str) or not location.strip():
        raise InputError("Missing required parameter: location")

    place = await geocode(location)
    latitude, longitude = place.get("latitude"), place.get("longitude")
    full_location = ", ".join(p for p in (place.get("name"), place.get("country")) if p)
    logger.info(f"Weather lookup for {location!r} resolved to {full_location} ({latitude}, {longitude})")

    data = await http.get_json(
        FORECAST_ENDPOINT,
        {
            "latitude": latitude,
            "longitude": longitude,
            "current": CURRENT_FIELDS,
            "daily": DAILY_FIELDS,
            "timezone": "auto",
        },
        label="Forecast request",
    )
    current = (data or {}).get("current")
    if not current:
        raise UpstreamError(f"Failed to get weather data for {full_location}")

    return {
        "location": full_location,
        "place": {
            "name": place.get("name"),
            "country": place.get("country"),
            "region": place.get("admin1"),
            "latitude": latitude,
            "longitude": longitude,
            "timezone": data.get("timezone") or place.get("timezone"),
        },
        "current": {
            "temperature": current.get("temperature_2m"),
            "humidity": current.get("relative_humidity_2m"),
            "windSpeed": current.get("wind_speed_10m"),
            "weatherCode": current.get("weather_code"),
            "weatherDescription": describe(current.get("weather_code")),
            "time": current.get("time"),
        },
        "forecast": {"daily": _daily(data.get("daily") or {})},
        "units": _units(data),
    }


TOOLS = (
    ToolSpec(
        name=ToolName.WEATHER,
        description="Current weather and daily forecast for a place name (Open-Meteo).",
        input_schema={
            "type": "object",
            "properties": {"location": {"type": "string", "description": "City or place name"}},
            "required": ["location"],
            "additionalProperties": False,
        },
        handler=get_weather,
        aliases=("weather",),
        sample={"location": "Oslo"},
    ),
)
