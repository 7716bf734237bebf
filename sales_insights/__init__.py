"""
Sales Insights

Trend, year-over-year and segmentation reporting over a retail star schema.
"""

__version__ = "1.0.0"
