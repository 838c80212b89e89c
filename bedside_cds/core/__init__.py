"""
Core calculators for bedside clinical decision support.
"""
