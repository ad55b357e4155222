"""
Persistence for locators and usage statistics.
"""

from .locator_store import LocatorStore, scope_for_url
from .usage_stats import UsageTracker

__all__ = ["LocatorStore", "UsageTracker", "scope_for_url"]
