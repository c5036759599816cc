"""Read-only aggregations over the stored collections.

This package holds the pure functions behind the dashboard views: period
bucket keys, goal progress, summary tiles with period-over-period growth,
display filters and pandas analytics tables. Nothing here mutates or
persists data.
"""
