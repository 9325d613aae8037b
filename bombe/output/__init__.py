"""
Bombe Output
=============

Console and report output for search results.
"""

from bombe.output.console import BombeConsoleOutput
from bombe.output.report import BombeReportGenerator

__all__ = ["BombeConsoleOutput", "BombeReportGenerator"]
