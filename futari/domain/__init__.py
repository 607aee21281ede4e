"""Domain layer - 外部依存なしのドメインモデルとインターフェース定義"""

from futari.domain.errors import (
    FetchError,
    InvalidValueError,
    RemoteNotFoundError,
    RemoteStoreError,
    RemoteWriteRejectedError,
    SessionResolutionError,
    SyncError,
)
from futari.domain.models import (
    EntityKind,
    HouseholdSnapshot,
    Identity,
    MutationResult,
    Profile,
    Role,
    Shift,
    ShiftType,
    Task,
    TaskCategory,
    TaskDraft,
    TaskFrequency,
    TaskPatch,
)
from futari.domain.ports import AuthProvider, RemoteStore

__all__ = [
    # Models
    "EntityKind",
    "ShiftType",
    "Role",
    "TaskCategory",
    "TaskFrequency",
    "Identity",
    "Profile",
    "Shift",
    "Task",
    "TaskDraft",
    "TaskPatch",
    "MutationResult",
    "HouseholdSnapshot",
    # Errors
    "SyncError",
    "InvalidValueError",
    "SessionResolutionError",
    "FetchError",
    "RemoteStoreError",
    "RemoteWriteRejectedError",
    "RemoteNotFoundError",
    # Ports
    "RemoteStore",
    "AuthProvider",
]
