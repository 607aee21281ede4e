"""派生ビュー - キャッシュのスナップショットに対する純粋関数

状態もキャッシュも持たず、呼ばれるたびに計算し直す。
日付は ISO 文字列（YYYY-MM-DD）の完全一致で比較する。
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from futari.domain.models import Identity, Profile, Role, Shift, Task

_WEEKDAYS_JA = ("月", "火", "水", "木", "金", "土", "日")
UNKNOWN_ROLE_LABEL = "不明"


class TaskFilter(Enum):
    """タスク一覧の絞り込み"""

    ALL = "all"
    HUSBAND = "husband"
    WIFE = "wife"
    COMPLETED = "completed"


# ── 基本ビュー ────────────────────────────────────────────────────────────────


def get_shift(shifts: Iterable[Shift], user_id: str, date_str: str) -> Shift | None:
    """(user_id, date) のシフト。なければ None"""
    return next(
        (s for s in shifts if s.user_id == user_id and s.date == date_str), None
    )


def get_tasks_for_date(tasks: Iterable[Task], date_str: str) -> list[Task]:
    return [t for t in tasks if t.date == date_str]


def tasks_for_assignee(
    tasks: Iterable[Task], date_str: str, assignee_id: str
) -> list[Task]:
    """指定日のうち assignee_id 担当のタスク"""
    return [t for t in get_tasks_for_date(tasks, date_str) if t.assignee_id == assignee_id]


# ── プロファイル ──────────────────────────────────────────────────────────────


def current_profile(
    profiles: Iterable[Profile], identity: Identity | None
) -> Profile | None:
    """セッションの uid に紐づくプロファイル（最初の1件）"""
    if identity is None:
        return None
    return next((p for p in profiles if p.user_id == identity.uid), None)


def profile_for_role(profiles: Iterable[Profile], role: Role) -> Profile | None:
    return next((p for p in profiles if p.role is role), None)


def assignee_role_label(profiles: Iterable[Profile], assignee_id: str) -> str:
    """担当者の役割表示。プロファイルが見つからなければ「不明」"""
    profile = next((p for p in profiles if p.id == assignee_id), None)
    return profile.role.value if profile else UNKNOWN_ROLE_LABEL


# ── 集計・絞り込み ────────────────────────────────────────────────────────────


def filter_tasks(
    tasks: Iterable[Task], profiles: Iterable[Profile], task_filter: TaskFilter
) -> list[Task]:
    """
    タスク一覧を絞り込む。

    HUSBAND / WIFE は該当ロールのプロファイルがなければ空リストを返す。
    """
    tasks = list(tasks)
    if task_filter is TaskFilter.ALL:
        return tasks
    if task_filter is TaskFilter.COMPLETED:
        return [t for t in tasks if t.is_completed]
    role = Role.HUSBAND if task_filter is TaskFilter.HUSBAND else Role.WIFE
    profile = profile_for_role(profiles, role)
    if profile is None:
        return []
    return [t for t in tasks if t.assignee_id == profile.id]


def completion_summary(tasks: Iterable[Task]) -> tuple[int, int]:
    """(完了数, 総数)"""
    tasks = list(tasks)
    return sum(1 for t in tasks if t.is_completed), len(tasks)


# ── 日付 ──────────────────────────────────────────────────────────────────────


def today_iso(tz: str | ZoneInfo = "Asia/Tokyo") -> str:
    """指定タイムゾーンでの今日の日付（YYYY-MM-DD）"""
    zone = ZoneInfo(tz) if isinstance(tz, str) else tz
    return datetime.now(zone).date().isoformat()


def week_dates(base: date, offset: int = 0) -> list[date]:
    """base を含む週（月曜始まり）を offset 週ずらした7日間"""
    base = base + timedelta(weeks=offset)
    monday = base - timedelta(days=base.weekday())
    return [monday + timedelta(days=i) for i in range(7)]


def format_date_ja(date_str: str) -> str:
    """例: "2024-05-01" → "2024年5月1日(水)" """
    d = date.fromisoformat(date_str)
    return f"{d.year}年{d.month}月{d.day}日({_WEEKDAYS_JA[d.weekday()]})"
