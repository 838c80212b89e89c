"""
Bedside Clinical Decision Support

Risk scoring, sepsis screening, fall and pressure-ulcer assessment, renal /
hepatic dose adjustment and CRITICAL alert publishing for a single patient
snapshot.
"""

__version__ = "1.0.0"
