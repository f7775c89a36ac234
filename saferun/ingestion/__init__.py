"""
Ingestion layer: where per-request context comes from.

Submodules:
  weather_provider — ``WeatherProvider`` protocol, fixed and seeded
                     simulated providers, and running advice text.
"""
