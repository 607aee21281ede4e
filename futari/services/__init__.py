"""Services layer - 同期コア"""

from futari.services.entity_cache import EntityCache
from futari.services.household_store import HouseholdStore
from futari.services.mutation_coordinator import MutationCoordinator
from futari.services.session_tracker import SessionTracker

__all__ = [
    "HouseholdStore",
    "SessionTracker",
    "EntityCache",
    "MutationCoordinator",
]
