"""Normalization utilities for the pipeline.

Provides functions to classify raw ESG submissions, resolve their reporting
year, parse metric values strictly, and flatten them into the Clean layer of
`NormalizedEntry` records (in memory or partition-wise with Dask).
"""
