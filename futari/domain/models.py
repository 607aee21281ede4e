"""ドメインモデル - 外部依存なしのデータ構造

リモートストアの行（snake_case の dict）とエンティティの相互変換もここで行う。
任意フィールドはリモートで null / 欠落の場合 None（= 未設定）として扱う。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date as _date
from enum import Enum
from typing import Any

from futari.domain.errors import InvalidValueError, SyncError


class _LabelEnum(Enum):
    """文字列リテラルを値に持つ閉じた列挙型の基底"""

    @classmethod
    def parse(cls, value: Any):
        """値から列挙メンバーを生成。未知の値は InvalidValueError"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise InvalidValueError(f"invalid {cls.__name__}: {value!r}") from e


class ShiftType(_LabelEnum):
    """勤務区分"""

    DAY = "日勤"
    NIGHT = "夜勤"
    POST_NIGHT = "明け"
    REST = "休日"

    @property
    def icon(self) -> str:
        return _SHIFT_ICONS[self]

    @property
    def label(self) -> str:
        return self.value


_SHIFT_ICONS = {
    ShiftType.DAY: "\U0001F305",
    ShiftType.NIGHT: "\U0001F319",
    ShiftType.POST_NIGHT: "\U0001F634",
    ShiftType.REST: "\U0001F3E0",
}


class Role(_LabelEnum):
    """パートナーの役割"""

    HUSBAND = "夫"
    WIFE = "妻"


class TaskCategory(_LabelEnum):
    """家事のカテゴリ"""

    COOKING = "料理"
    LAUNDRY = "洗濯"
    CLEANING = "掃除"
    CHILDCARE = "育児"
    SHOPPING = "買い物"
    OTHER = "その他"


class TaskFrequency(_LabelEnum):
    """繰り返し頻度（表示用ラベルのみ。将来分の展開はしない）"""

    DAILY = "毎日"
    TWICE_A_WEEK = "週2回"
    THREE_TIMES_A_WEEK = "週3回"
    BIWEEKLY = "隔週"
    WEEKLY = "週1回"


class EntityKind(Enum):
    """エンティティ種別（リモートのテーブル名を兼ねる）"""

    PROFILES = "profiles"
    SHIFTS = "shifts"
    TASKS = "tasks"


# ── 検証ヘルパー ──────────────────────────────────────────────────────────────


def require_iso_date(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidValueError(f"date must be an ISO string: {value!r}")
    try:
        parsed = _date.fromisoformat(value)
    except ValueError as e:
        raise InvalidValueError(f"invalid ISO date: {value!r}") from e
    # 正規形 YYYY-MM-DD のみ受け付ける（週番号形式などは不可）
    if parsed.isoformat() != value:
        raise InvalidValueError(f"date must be YYYY-MM-DD: {value!r}")
    return value


def _require_title(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidValueError("title must be a non-empty string")
    return value


def _require_identifier(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise InvalidValueError(f"{name} must be a non-empty string")
    return value


def _optional_duration(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidValueError(f"duration_minutes must be a positive integer: {value!r}")
    return value


def _optional_enum(enum_cls: type[_LabelEnum], value: Any):
    if value is None:
        return None
    return enum_cls.parse(value)


# ── エンティティ ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Identity:
    """認証済みセッションの識別情報"""

    uid: str
    email: str = ""
    display_name: str = ""


@dataclass(frozen=True)
class Profile:
    """世帯メンバー（アカウント作成時に外部で作成される。読み取り専用）"""

    id: str
    user_id: str  # 作成したセッションの uid
    name: str
    role: Role

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Profile:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            role=Role.parse(row["role"]),
        )


@dataclass(frozen=True)
class Shift:
    """ユーザー×日付ごとのシフト"""

    id: str
    user_id: str
    date: str  # YYYY-MM-DD
    shift_type: ShiftType

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Shift:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            date=row["date"],
            shift_type=ShiftType.parse(row["shift_type"]),
        )


@dataclass(frozen=True)
class Task:
    """特定日の家事1件"""

    id: str
    assignee_id: str  # Profile.id
    title: str
    date: str  # YYYY-MM-DD
    is_completed: bool
    category: TaskCategory | None = None
    duration_minutes: int | None = None
    frequency: TaskFrequency | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Task:
        return cls(
            id=row["id"],
            assignee_id=row["assignee_id"],
            title=row["title"],
            date=row["date"],
            is_completed=bool(row.get("is_completed", False)),
            category=_optional_enum(TaskCategory, row.get("category")),
            duration_minutes=row.get("duration_minutes"),
            frequency=_optional_enum(TaskFrequency, row.get("frequency")),
        )


# ── 書き込み入力 ──────────────────────────────────────────────────────────────

# Task のフィールド名 → リモートのカラム名
TASK_COLUMNS = {
    "assignee_id": "assignee_id",
    "title": "title",
    "category": "category",
    "duration_minutes": "duration_minutes",
    "date": "date",
    "is_completed": "is_completed",
    "frequency": "frequency",
}


def _to_column_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class TaskDraft:
    """ID 採番前のタスク（add_task の入力）

    文字列で渡された列挙値はここで列挙型に変換し、不正値は構築時に拒否する。
    """

    assignee_id: str
    title: str
    date: str
    is_completed: bool = False
    category: TaskCategory | None = None
    duration_minutes: int | None = None
    frequency: TaskFrequency | None = None

    def __post_init__(self) -> None:
        _require_identifier("assignee_id", self.assignee_id)
        _require_title(self.title)
        require_iso_date(self.date)
        if not isinstance(self.is_completed, bool):
            raise InvalidValueError("is_completed must be a bool")
        _optional_duration(self.duration_minutes)
        object.__setattr__(self, "category", _optional_enum(TaskCategory, self.category))
        object.__setattr__(self, "frequency", _optional_enum(TaskFrequency, self.frequency))

    def to_row(self) -> dict[str, Any]:
        """リモート行に変換。未設定の任意フィールドはキーごと省く"""
        row: dict[str, Any] = {
            "assignee_id": self.assignee_id,
            "title": self.title,
            "date": self.date,
            "is_completed": self.is_completed,
        }
        for name in ("category", "duration_minutes", "frequency"):
            value = getattr(self, name)
            if value is not None:
                row[TASK_COLUMNS[name]] = _to_column_value(value)
        return row


class _Unset:
    """TaskPatch で「指定なし」を表す番兵"""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskPatch:
    """タスクの部分更新

    明示的に渡されたフィールドだけが「存在する」とみなされ、リモートに書き込まれる。
    任意フィールド（category, duration_minutes, frequency）に None を渡すと未設定に戻す。
    """

    assignee_id: str = UNSET
    title: str = UNSET
    date: str = UNSET
    is_completed: bool = UNSET
    category: TaskCategory | None = UNSET
    duration_minutes: int | None = UNSET
    frequency: TaskFrequency | None = UNSET

    def __post_init__(self) -> None:
        present = self.fields()
        if "assignee_id" in present:
            _require_identifier("assignee_id", self.assignee_id)
        if "title" in present:
            _require_title(self.title)
        if "date" in present:
            require_iso_date(self.date)
        if "is_completed" in present and not isinstance(self.is_completed, bool):
            raise InvalidValueError("is_completed must be a bool")
        if "duration_minutes" in present:
            _optional_duration(self.duration_minutes)
        if "category" in present:
            object.__setattr__(self, "category", _optional_enum(TaskCategory, self.category))
        if "frequency" in present:
            object.__setattr__(self, "frequency", _optional_enum(TaskFrequency, self.frequency))

    def fields(self) -> tuple[str, ...]:
        """指定されたフィールド名（宣言順）"""
        return tuple(name for name in TASK_COLUMNS if getattr(self, name) is not UNSET)

    def to_row(self) -> dict[str, Any]:
        """指定されたフィールドだけを含むリモート行"""
        return {
            TASK_COLUMNS[name]: _to_column_value(getattr(self, name))
            for name in self.fields()
        }


# ── 結果・スナップショット ────────────────────────────────────────────────────


@dataclass(frozen=True)
class MutationResult:
    """書き込み操作の結果。失敗時は error に原因を持つ"""

    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class HouseholdSnapshot:
    """プレゼンテーション層に公開する状態一式"""

    identity: Identity | None
    current_profile: Profile | None
    profiles: tuple[Profile, ...] = ()
    shifts: tuple[Shift, ...] = ()
    tasks: tuple[Task, ...] = ()
    is_loading: bool = False
    errors: dict[EntityKind, SyncError] = field(default_factory=dict)
