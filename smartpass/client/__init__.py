"""
==============================================================================
Client Package
==============================================================================

HTTP client for the SmartPass spreadsheet endpoint.

==============================================================================
"""

from .api import SmartPassClient

__all__ = ["SmartPassClient"]
