"""Invoice automation ROI calculator."""

__version__ = "0.1.0"
