"""
Expiry Domain

Expiry policies and the per-file timer registry contract.
"""

from .policies import ExpiryPolicy, FixedDurationPolicy, WeeklyCutoffPolicy
from .scheduler import ExpiryCallback, ExpiryScheduler

__all__ = [
    "ExpiryCallback",
    "ExpiryPolicy",
    "ExpiryScheduler",
    "FixedDurationPolicy",
    "WeeklyCutoffPolicy",
]
