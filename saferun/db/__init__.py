"""
Local SQLite persistence: connection management, schema, and repositories.
"""
