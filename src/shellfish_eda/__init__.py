"""Exploratory analysis of shellfish sanitation E. coli monitoring data."""

__version__ = "0.1.0"
