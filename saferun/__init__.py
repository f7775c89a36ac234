"""saferun — route recommendation and time-slot safety analysis for urban runners."""

__version__ = "0.1.0"
