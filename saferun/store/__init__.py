"""
Route, profile, and feedback stores.

Modules:
  base           — ``RecommendationStore`` protocol and ``StoreError``.
  sqlite_store   — ``SqliteStore`` over the local ``saferun.db`` schema.
  supabase_store — ``SupabaseStore`` over the Supabase PostgREST API.
  factory        — ``build_store(config)`` picks a backend from ``StoreConfig``.
"""
