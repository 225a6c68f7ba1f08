"""
Haul Quote Package

Price-quoting tool for a household bulky-waste carry-down service.
Prices a job (distance, floors, helpers, weekend, items) against an
operator-editable rate table and exports the quote as text or PDF.
"""

__version__ = "1.0.0"
