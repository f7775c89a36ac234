"""
Weather providers and running advice.

A ``WeatherProvider`` supplies the ``WeatherReading`` a recommendation
request is scored under.  Two implementations ship:

  FixedWeatherProvider     — always returns the reading it was built with
                             (CLI flags, tests).
  SimulatedWeatherProvider — seeded pseudo-random mild-weather readings for
                             demos; the same seed yields the same sequence.

``running_advice`` and ``weather_route_hint`` turn a reading into short
runner-facing guidance.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol

from saferun.models.context import WeatherReading
from saferun.taxonomy.context_taxonomy import RAIN_CONDITIONS, WeatherCondition

logger = logging.getLogger(__name__)

_CONDITION_ADVICE: dict[WeatherCondition, str] = {
    WeatherCondition.CLEAR:         "Perfect running weather!",
    WeatherCondition.SUNNY:         "Good for running; wear sun protection.",
    WeatherCondition.PARTLY_CLOUDY: "Great running conditions.",
    WeatherCondition.CLOUDY:        "Comfortable running weather.",
    WeatherCondition.OVERCAST:      "Fine for running; the air is humid.",
    WeatherCondition.LIGHT_RAIN:    "Consider an indoor session or wait for the rain to stop.",
    WeatherCondition.RAIN:          "Outdoor running is not recommended.",
    WeatherCondition.HEAVY_RAIN:    "Avoid outdoor exercise.",
    WeatherCondition.STORM:         "Avoid outdoor exercise.",
    WeatherCondition.SNOW:          "Slippery surfaces; take care.",
    WeatherCondition.FOG:           "Low visibility; take care.",
    WeatherCondition.WINDY:         "Mind the headwind and adjust your pace.",
}

# Conditions the simulator draws from
_SIMULATED_CONDITIONS: tuple[WeatherCondition, ...] = (
    WeatherCondition.CLEAR,
    WeatherCondition.SUNNY,
    WeatherCondition.PARTLY_CLOUDY,
    WeatherCondition.CLOUDY,
    WeatherCondition.LIGHT_RAIN,
)


class WeatherProvider(Protocol):
    def current(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> WeatherReading:
        """Return the current reading for a location (or a default one)."""
        ...


class FixedWeatherProvider:
    """Returns one fixed reading regardless of location."""

    def __init__(self, reading: WeatherReading) -> None:
        self.reading = reading

    def current(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> WeatherReading:
        return self.reading


class SimulatedWeatherProvider:
    """Seeded generator of plausible mild-weather readings.

    Ranges: temperature 15-30 C, humidity 40-80 %, wind 0-15 km/h.

    Args:
        seed: Seed for the private ``random.Random`` instance.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def current(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> WeatherReading:
        condition = self._rng.choice(_SIMULATED_CONDITIONS)
        reading = WeatherReading(
            temperature_c=round(15 + self._rng.random() * 15),
            condition=condition,
            humidity_pct=round(40 + self._rng.random() * 40),
            wind_speed_kmh=round(self._rng.random() * 15),
            description=condition.value.replace("_", " "),
        )
        logger.debug("Simulated weather: %s", reading)
        return reading


def running_advice(reading: WeatherReading) -> str:
    """One line of advice for the reading.

    Known conditions have fixed advice; otherwise temperature decides.
    """
    advice = _CONDITION_ADVICE.get(reading.condition)
    if advice is not None:
        return advice

    t = reading.temperature_c
    if t < 0:
        return "Very cold; keep warm and consider running indoors."
    if t > 35:
        return "Very hot; avoid the midday heat or run indoors."
    if 15 <= t <= 25:
        return "Ideal temperature for a run!"
    if t < 15:
        return "Cool weather; warm up well and dress in layers."
    return "Warm weather; hydrate and watch for heat stress."


def weather_route_hint(reading: WeatherReading) -> str:
    """Which kind of route suits the reading: indoor, shade, sheltered, or outdoor."""
    if reading.condition in RAIN_CONDITIONS and reading.condition != WeatherCondition.LIGHT_RAIN:
        return "indoor"
    if reading.temperature_c > 30:
        return "shade"
    if reading.temperature_c < 5:
        return "sheltered"
    return "outdoor"
