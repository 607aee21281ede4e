"""HouseholdStore - 同期コアのコンテキストオブジェクト

セッション開始時に1回だけ生成し、プレゼンテーション層へ参照で渡す。
モジュールレベルの共有状態は持たない。
"""

from __future__ import annotations

import logging

from futari.domain.errors import InvalidValueError
from futari.domain.models import (
    HouseholdSnapshot,
    Identity,
    MutationResult,
    Profile,
    Shift,
    ShiftType,
    Task,
    TaskCategory,
    TaskDraft,
    TaskFrequency,
    TaskPatch,
)
from futari.domain.ports import AuthProvider, RemoteStore
from futari.services import views
from futari.services.entity_cache import EntityCache
from futari.services.mutation_coordinator import MutationCoordinator
from futari.services.session_tracker import SessionTracker

logger = logging.getLogger(__name__)


class HouseholdStore:
    """
    SessionTracker / EntityCache / MutationCoordinator を束ね、
    状態スナップショットと6つの操作を公開する。

    使い方:
        async with HouseholdStore(store, auth) as household:
            await household.wait_idle()
            today = household.get_tasks_for_date(views.today_iso())
    """

    def __init__(
        self, store: RemoteStore, auth: AuthProvider, timezone: str = "Asia/Tokyo"
    ) -> None:
        """
        Args:
            store: リモートのテーブルストア
            auth: 認証コラボレーター
            timezone: 「今日」を決めるタイムゾーン
        """
        self._auth = auth
        self.timezone = timezone
        self.session = SessionTracker(auth)
        self.cache = EntityCache(store, self.session)
        self.mutations = MutationCoordinator(store, self.cache)

    async def start(self) -> None:
        await self.session.start()

    def close(self) -> None:
        self.session.close()

    async def __aenter__(self) -> HouseholdStore:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    async def wait_idle(self) -> None:
        """初回取得・再取得が落ち着くまで待つ"""
        await self.cache.wait_idle()

    # ── 状態 ──────────────────────────────────────────────────────────────────

    @property
    def identity(self) -> Identity | None:
        return self.session.identity

    @property
    def current_profile(self) -> Profile | None:
        return views.current_profile(self.cache.profiles, self.session.identity)

    @property
    def is_loading(self) -> bool:
        return not self.session.ready or self.cache.is_loading

    def snapshot(self) -> HouseholdSnapshot:
        return HouseholdSnapshot(
            identity=self.identity,
            current_profile=self.current_profile,
            profiles=self.cache.profiles,
            shifts=self.cache.shifts,
            tasks=self.cache.tasks,
            is_loading=self.is_loading,
            errors=self.cache.errors,
        )

    # ── 派生ビュー ────────────────────────────────────────────────────────────

    def get_shift(self, user_id: str, date: str) -> Shift | None:
        return views.get_shift(self.cache.shifts, user_id, date)

    def get_tasks_for_date(self, date: str) -> list[Task]:
        return views.get_tasks_for_date(self.cache.tasks, date)

    def today(self) -> str:
        return views.today_iso(self.timezone)

    # ── 書き込み ──────────────────────────────────────────────────────────────

    async def upsert_shift(
        self, user_id: str, date: str, shift_type: ShiftType | str
    ) -> MutationResult:
        return await self.mutations.upsert_shift(user_id, date, shift_type)

    async def add_task(self, draft: TaskDraft) -> MutationResult:
        return await self.mutations.add_task(draft)

    async def add_task_for_today(
        self,
        assignee_id: str,
        title: str,
        *,
        category: TaskCategory | str | None = None,
        duration_minutes: int | None = None,
        frequency: TaskFrequency | str | None = None,
    ) -> MutationResult:
        """作成日（今日）の日付でタスクを作成する"""
        try:
            draft = TaskDraft(
                assignee_id=assignee_id,
                title=title,
                date=self.today(),
                is_completed=False,
                category=category,
                duration_minutes=duration_minutes,
                frequency=frequency,
            )
        except InvalidValueError as e:
            logger.warning("Rejected task draft: %s", e)
            return MutationResult(error=e)
        return await self.mutations.add_task(draft)

    async def update_task(self, task_id: str, patch: TaskPatch) -> MutationResult:
        return await self.mutations.update_task(task_id, patch)

    async def delete_task(self, task_id: str) -> MutationResult:
        return await self.mutations.delete_task(task_id)

    async def toggle_task(self, task_id: str) -> MutationResult:
        return await self.mutations.toggle_task(task_id)

    async def logout(self) -> None:
        """サインアウト。キャッシュは認証の変更通知を受けて空になる"""
        logger.info("Logging out uid=%s", self.identity.uid if self.identity else None)
        await self._auth.sign_out()
