"""esg_pipeline package.

Contains modules for reading raw ESG metric submissions from a local store,
the data API or MongoDB, normalizing them into flat metric entries, and
building per-category score summaries and year-over-year series.

Architecture:
- Raw → Clean → Gold layers (submissions → entries → score summaries)
- Dask is used for partitioned normalization of large submission sets
- Pydantic models validate every layer
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
