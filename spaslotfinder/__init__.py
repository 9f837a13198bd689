"""
spaslotfinder - appointment slot availability for a single-resource spa day.
"""

__version__ = "0.1.0"
