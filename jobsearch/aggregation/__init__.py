"""Aggregation of search results by address and job number.

This module provides:
- Aggregate, JobDigest, Contributor: immutable result-group models
- JobAggregator: groups ranked entries into ordered aggregates
- aggregation_key: the normalized identity of a group
"""

from .models import Aggregate, Contributor, JobDigest
from .service import JobAggregator, aggregation_key

__all__ = [
    "JobAggregator",
    "aggregation_key",
    "Aggregate",
    "JobDigest",
    "Contributor",
]
