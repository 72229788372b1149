"""
HOS Compliance app.

Hours of Service compliance engine for the operations dashboard: duty
segment reconstruction, rule evaluation, availability, violation
prediction and fleet aggregation.
"""
