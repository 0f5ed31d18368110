"""
Full vs quick scan planning.
"""

from uptimechamps.scan.planner import ScanPlanner

__all__ = ["ScanPlanner"]
