"""
Adapters layer - External data sources for availability records.
"""

from .api_client import AvailabilityApiClient
from .json_source import JsonAvailabilitySource

__all__ = ["AvailabilityApiClient", "JsonAvailabilitySource"]
