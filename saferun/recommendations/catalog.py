"""
Built-in fallback route catalog.

Served when the store's route table errors or comes back empty, so a
catalog outage stays invisible to runners.  The routes are well-known
Shanghai running paths; the list is fixed and deterministic.
"""

from __future__ import annotations

from saferun.models.route import GeoPoint, Route
from saferun.taxonomy.context_taxonomy import LightingQuality

_FALLBACK_ROUTES: tuple[dict, ...] = (
    {
        "route_id": "route-1",
        "name": "The Bund Riverside Promenade",
        "description": "Classic riverside route along the Huangpu with views of "
                       "the Bund skyline and Lujiazui.",
        "distance_km": 5.2,
        "difficulty_level": 3,
        "terrain_type": "flat",
        "features": ["scenic", "riverside", "night-view", "safe"],
        "avg_rating": 4.6,
        "total_ratings": 128,
        "elevation_gain_m": 15,
        "estimated_duration_min": 35,
        "safety_rating": 9,
        "lighting_quality": LightingQuality.EXCELLENT,
        "weather_suitability": {"rain": 0.3, "sun": 0.9, "wind": 0.7},
        "time_suitability": {"morning": 0.9, "afternoon": 0.8, "evening": 0.95, "night": 0.85},
        "start": (121.4737, 31.2304),
        "end": (121.5057, 31.2396),
    },
    {
        "route_id": "route-2",
        "name": "Century Park Lakeside Loop",
        "description": "Tree-lined loop around the lake inside Century Park.",
        "distance_km": 3.8,
        "difficulty_level": 2,
        "terrain_type": "flat",
        "features": ["scenic", "greenery", "lake", "quiet"],
        "avg_rating": 4.4,
        "total_ratings": 95,
        "elevation_gain_m": 8,
        "estimated_duration_min": 25,
        "safety_rating": 8,
        "lighting_quality": LightingQuality.GOOD,
        "weather_suitability": {"rain": 0.6, "sun": 0.8, "wind": 0.9},
        "time_suitability": {"morning": 0.95, "afternoon": 0.7, "evening": 0.8, "night": 0.4},
        "start": (121.5569, 31.2196),
        "end": (121.5569, 31.2196),
    },
    {
        "route_id": "route-3",
        "name": "Xujiahui Park Jogging Path",
        "description": "Short downtown green path, good for beginners and "
                       "runners short on time.",
        "distance_km": 2.5,
        "difficulty_level": 1,
        "terrain_type": "flat",
        "features": ["facilities", "short", "beginner-friendly", "transit"],
        "avg_rating": 4.2,
        "total_ratings": 67,
        "elevation_gain_m": 5,
        "estimated_duration_min": 18,
        "safety_rating": 9,
        "lighting_quality": LightingQuality.EXCELLENT,
        "weather_suitability": {"rain": 0.7, "sun": 0.8, "wind": 0.8},
        "time_suitability": {"morning": 0.8, "afternoon": 0.9, "evening": 0.85, "night": 0.7},
        "start": (121.4352, 31.1993),
        "end": (121.4352, 31.1993),
    },
    {
        "route_id": "route-4",
        "name": "Jing'an Sculpture Park Track",
        "description": "Art park track lined with outdoor sculptures.",
        "distance_km": 2.8,
        "difficulty_level": 2,
        "terrain_type": "flat",
        "features": ["art", "culture", "urban-oasis"],
        "avg_rating": 4.3,
        "total_ratings": 82,
        "elevation_gain_m": 6,
        "estimated_duration_min": 20,
        "safety_rating": 8,
        "lighting_quality": LightingQuality.GOOD,
        "weather_suitability": {"rain": 0.5, "sun": 0.9, "wind": 0.7},
        "time_suitability": {"morning": 0.8, "afternoon": 0.8, "evening": 0.9, "night": 0.6},
        "start": (121.4458, 31.2288),
        "end": (121.4458, 31.2288),
    },
    {
        "route_id": "route-5",
        "name": "Fuxing Park Morning Loop",
        "description": "Historic French-style park under old plane trees.",
        "distance_km": 1.8,
        "difficulty_level": 1,
        "terrain_type": "flat",
        "features": ["historic", "shade", "old-trees"],
        "avg_rating": 4.1,
        "total_ratings": 54,
        "elevation_gain_m": 3,
        "estimated_duration_min": 15,
        "safety_rating": 7,
        "lighting_quality": LightingQuality.FAIR,
        "weather_suitability": {"rain": 0.4, "sun": 0.8, "wind": 0.9},
        "time_suitability": {"morning": 0.95, "afternoon": 0.6, "evening": 0.7, "night": 0.3},
        "start": (121.4737, 31.2304),
        "end": (121.4737, 31.2304),
    },
    {
        "route_id": "route-6",
        "name": "Lujiazui Riverside Avenue",
        "description": "Riverside path through the financial district skyline.",
        "distance_km": 4.5,
        "difficulty_level": 3,
        "terrain_type": "flat",
        "features": ["scenic", "modern", "skyline"],
        "avg_rating": 4.5,
        "total_ratings": 156,
        "elevation_gain_m": 12,
        "estimated_duration_min": 30,
        "safety_rating": 9,
        "lighting_quality": LightingQuality.EXCELLENT,
        "weather_suitability": {"rain": 0.3, "sun": 0.9, "wind": 0.6},
        "time_suitability": {"morning": 0.8, "afternoon": 0.8, "evening": 0.95, "night": 0.9},
        "start": (121.5057, 31.2396),
        "end": (121.5057, 31.2396),
    },
    {
        "route_id": "route-7",
        "name": "Zhongshan Park Ring Track",
        "description": "Wide track in a traditional city park, suits all ages.",
        "distance_km": 3.2,
        "difficulty_level": 2,
        "terrain_type": "flat",
        "features": ["facilities", "wide", "all-ages"],
        "avg_rating": 4.0,
        "total_ratings": 73,
        "elevation_gain_m": 7,
        "estimated_duration_min": 22,
        "safety_rating": 8,
        "lighting_quality": LightingQuality.GOOD,
        "weather_suitability": {"rain": 0.6, "sun": 0.8, "wind": 0.8},
        "time_suitability": {"morning": 0.9, "afternoon": 0.7, "evening": 0.8, "night": 0.5},
        "start": (121.4220, 31.2196),
        "end": (121.4220, 31.2196),
    },
    {
        "route_id": "route-8",
        "name": "Huangpu Cross-River Greenway",
        "description": "Long route across both banks of the Huangpu for "
                       "experienced runners.",
        "distance_km": 8.5,
        "difficulty_level": 5,
        "terrain_type": "flat",
        "features": ["scenic", "long-distance", "challenge", "cross-river"],
        "avg_rating": 4.7,
        "total_ratings": 89,
        "elevation_gain_m": 25,
        "estimated_duration_min": 55,
        "safety_rating": 8,
        "lighting_quality": LightingQuality.GOOD,
        "weather_suitability": {"rain": 0.2, "sun": 0.9, "wind": 0.5},
        "time_suitability": {"morning": 0.9, "afternoon": 0.7, "evening": 0.8, "night": 0.6},
        "start": (121.4737, 31.2304),
        "end": (121.5057, 31.2396),
    },
)


def fallback_routes() -> list[Route]:
    """Return a fresh list of the built-in fallback routes, in catalog order."""
    routes: list[Route] = []
    for spec in _FALLBACK_ROUTES:
        data = dict(spec)
        lon, lat = data.pop("start")
        end_lon, end_lat = data.pop("end")
        routes.append(
            Route(
                **data,
                start=GeoPoint(longitude=lon, latitude=lat),
                end=GeoPoint(longitude=end_lon, latitude=end_lat),
            )
        )
    return routes
