"""
Context taxonomy: the discrete environment values a recommendation request
is evaluated against.

Two dimensions describe the running context:
  - ``TimeSlot``         — the *when*: which of the 7 ordered day segments?
  - ``WeatherCondition`` — the *sky*: what is the reported weather condition?

``LightingQuality`` describes how well a route is lit after dark; it is the
fallback signal when a route has no explicit suitability value for a night slot.

Usage example::

    from saferun.taxonomy.context_taxonomy import TimeSlot, WeatherCondition

    slot      = TimeSlot.EVENING
    condition = WeatherCondition.LIGHT_RAIN

This module has NO imports from any other ``saferun`` package.
"""

from enum import StrEnum


class TimeSlot(StrEnum):
    """One of seven ordered buckets spanning a 24h day (local time)."""

    EARLY_MORNING = "early_morning"
    """05:00-07:00. Quiet streets, low light before sunrise."""

    MORNING = "morning"
    """07:00-10:00. Safest slot: daylight and commuter foot traffic."""

    LATE_MORNING = "late_morning"
    """10:00-12:00."""

    AFTERNOON = "afternoon"
    """12:00-17:00. Heat exposure in summer."""

    EVENING = "evening"
    """17:00-20:00. Busy paths, light fading."""

    NIGHT = "night"
    """20:00-23:00. Lighting becomes the dominant safety factor."""

    LATE_NIGHT = "late_night"
    """23:00-05:00. Highest risk slot."""


# Slots in which lighting quality replaces a missing suitability value.
DARK_SLOTS: frozenset[TimeSlot] = frozenset({TimeSlot.NIGHT, TimeSlot.LATE_NIGHT})

# Legacy four-part day names used by older route tables.
TIME_SLOT_ALIASES: dict[str, TimeSlot] = {
    "morning": TimeSlot.MORNING,
    "afternoon": TimeSlot.AFTERNOON,
    "evening": TimeSlot.EVENING,
    "night": TimeSlot.NIGHT,
}


class WeatherCondition(StrEnum):
    """Reported weather condition, as normalized by the weather collaborator."""

    CLEAR = "clear"
    SUNNY = "sunny"
    PARTLY_CLOUDY = "partly_cloudy"
    CLOUDY = "cloudy"
    OVERCAST = "overcast"
    LIGHT_RAIN = "light_rain"
    RAIN = "rain"
    HEAVY_RAIN = "heavy_rain"
    STORM = "storm"
    SNOW = "snow"
    FOG = "fog"
    WINDY = "windy"
    UNKNOWN = "unknown"
    """Unrecognized upstream condition; scored with a neutral-ish multiplier."""


SUN_CONDITIONS: frozenset[WeatherCondition] = frozenset({
    WeatherCondition.CLEAR, WeatherCondition.SUNNY,
})
RAIN_CONDITIONS: frozenset[WeatherCondition] = frozenset({
    WeatherCondition.LIGHT_RAIN, WeatherCondition.RAIN,
    WeatherCondition.HEAVY_RAIN, WeatherCondition.STORM,
})


def parse_weather_condition(value: str) -> WeatherCondition:
    """Map an upstream condition string onto ``WeatherCondition``.

    Accepts both ``"light-rain"`` and ``"light_rain"`` spellings.  Anything
    unrecognized becomes ``WeatherCondition.UNKNOWN`` rather than an error:
    the weather multiplier table has an explicit entry for it.
    """
    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return WeatherCondition(normalized)
    except ValueError:
        return WeatherCondition.UNKNOWN


class LightingQuality(StrEnum):
    """Ordinal lighting quality of a route after dark."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    NONE = "none"
