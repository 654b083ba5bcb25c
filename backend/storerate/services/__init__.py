"""
StoreRate Backend — Services Layer
===================================

What:  Business rules between routes (HTTP) and repositories (persistence).

Service Inventory:
    - access_control:    authorize() / ensure_allowed(): pure role and
                         ownership decisions
    - IdentityService:   users, registration, credential verification
    - StoreRegistry:     stores, name uniqueness, owner-scoped listing
    - RatingLedger:      ratings, one per (user, store)
    - RatingAggregator:  store average recomputation

Services never commit; the request's session scope does.
"""

from storerate.services.identity_service import IdentityService
from storerate.services.rating_aggregator import RatingAggregator, compute_average
from storerate.services.rating_ledger import RatingLedger
from storerate.services.store_registry import StoreRegistry

__all__ = [
    "IdentityService",
    "RatingAggregator",
    "RatingLedger",
    "StoreRegistry",
    "compute_average",
]
