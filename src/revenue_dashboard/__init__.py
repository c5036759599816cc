"""revenue_dashboard package.

Data core of a small CRM/revenue dashboard: revenue entries, sales calls and
revenue/client goals kept as three persisted collections, plus the
aggregations the dashboard reads from them.

Architecture:
- Pydantic models define the stored records and derived views
- A repository (JSON files or MongoDB) holds each collection wholesale
- `DataStore` mirrors the collections in memory and rewrites on every change
- `aggregate` computes goal progress, summaries and pandas analytics tables
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
