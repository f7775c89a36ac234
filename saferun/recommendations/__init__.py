"""
Recommendation engine: ranks running routes for a runner under the current
weather and time of day, explains each pick, and learns from feedback.

Modules
-------
signals   : Pure signal calculators (weather, preference, history, time,
            safety, popularity, novelty), each returning a score in [0, 1].
scorer    : ScoreComponents dataclass + compute_components() + aggregate().
reasoning : build_flags() + build_factors() + classify() — explanations.
ranker    : ScoredRoute dataclass + score_routes() + rank_top_n() +
            build_recommendations().
catalog   : fallback_routes() — built-in catalog for store outages.
engine    : RecommendationEngine — loads store data and runs the pipeline.
feedback  : FeedbackLearner — moving-average preference updates + stats.
errors    : Exceptions surfaced to callers.
"""
