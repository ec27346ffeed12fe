"""
Reporting layer: value formatting and console output.
"""

from iperfcompare.reporting.console import ConsoleReporter, summary_rows

__all__ = ["ConsoleReporter", "summary_rows"]
