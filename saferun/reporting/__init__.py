"""
saferun.reporting — terminal output for CLI commands.

Modules:
  formatters — ASCII formatters for recommendations, feedback statistics,
               and safety checks.
"""
