"""IICL Depot Life Cycle API."""

__version__ = "2.2.4"
