"""
Core modules for Lead Cost Report.

This package contains the expense allocation engine: window resolution,
fixed and variable cost proration, aggregation, and cost metrics.
"""
