"""
Time-slot safety analysis for runners.

Modules:
  analyzer — base slot safety, environmental risk, incident-adjusted slot
             safety, and the real-time assessment shown before a run.
"""
