"""
iperfcompare: iperf3 result normalization and comparison.

This package normalizes iperf3 JSON records (TCP or UDP) into stable
summaries and reduced series, and aligns up to six runs into
comparison-ready datasets.
"""

from importlib.metadata import version

__version__ = version("iperfcompare")

__all__ = ["__version__"]
