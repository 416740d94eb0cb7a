"""Gold-layer score aggregation helpers.

This package contains routines that convert the Clean layer of normalized
entries into score summaries (per year, overall, per company and year), plus
utilities to persist derived score rows in MongoDB and export summaries.
"""
