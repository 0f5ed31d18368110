"""
Uptimechamps - Jamf Pro Uptime Champions Report

Find the Macs that have gone the longest without a restart.

Uptimechamps authenticates against Jamf Pro, reads a boot-time Extension
Attribute from each managed computer, and prints a ranked list of the
longest-running machines.

Key Features:
    - OAuth client-credentials authentication against Jamf Pro
    - Full scan of every managed computer, or a quick scan of the
      machines ranked in the previous run
    - Bounded top-N cache so routine runs cost a handful of API calls
    - Diagnostic commands for locating the right Extension Attribute

Design Principles:
    - Read-only: no write calls are ever made to Jamf
    - Sequential and throttled: one request at a time
    - A failed run never overwrites a good cache
"""

__version__ = "0.1.0"

from uptimechamps.config.settings import Settings, load_config

__all__ = [
    "__version__",
    "Settings",
    "load_config",
]
