"""
Bombe Shared Module
===================

Configuration, logging, console presentation and ranking collections
shared by the Bombe tool packages.
"""

from shared.config import BombeConfig, GlobalConfig, SearchConfig

__all__ = ["BombeConfig", "GlobalConfig", "SearchConfig"]
