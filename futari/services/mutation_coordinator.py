"""MutationCoordinator - 書き込みの唯一の経路

各操作は「リモートへの書き込み → 該当コレクションの invalidate → 再取得完了を待つ」
の順で完了する。楽観的なローカル更新やバッチ化はしない。
失敗は例外ではなく MutationResult として呼び出し元に返す。
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from futari.domain.errors import (
    FetchError,
    InvalidValueError,
    RemoteWriteRejectedError,
)
from futari.domain.models import (
    EntityKind,
    MutationResult,
    ShiftType,
    TaskDraft,
    TaskPatch,
    require_iso_date,
)
from futari.domain.ports import RemoteStore
from futari.services.entity_cache import EntityCache

logger = logging.getLogger(__name__)

SHIFT_CONFLICT_KEYS = ("user_id", "date")


class MutationCoordinator:
    """
    Shift / Task の書き込みを調整する（Profile は読み取り専用）。

    書き込みが成功した場合のみ invalidate し、失敗時はキャッシュに触れない。
    """

    def __init__(self, store: RemoteStore, cache: EntityCache) -> None:
        self._store = store
        self._cache = cache

    async def upsert_shift(
        self, user_id: str, date: str, shift_type: ShiftType | str
    ) -> MutationResult:
        """(user_id, date) のシフトを作成または置き換える"""
        try:
            shift_type = ShiftType.parse(shift_type)
            require_iso_date(date)
            if not user_id:
                raise InvalidValueError("user_id must be a non-empty string")
        except InvalidValueError as e:
            logger.warning("Rejected shift upsert: %s", e)
            return MutationResult(error=e)

        row = {"user_id": user_id, "date": date, "shift_type": shift_type.value}
        return await self._write_then_refresh(
            EntityKind.SHIFTS,
            f"upsert shift user_id={user_id} date={date}",
            self._store.upsert,
            EntityKind.SHIFTS,
            row,
            SHIFT_CONFLICT_KEYS,
        )

    async def add_task(self, draft: TaskDraft) -> MutationResult:
        """タスクを作成（IDはリモートが採番）。未設定の任意フィールドは送らない"""
        return await self._write_then_refresh(
            EntityKind.TASKS,
            f"add task title={draft.title!r}",
            self._store.insert,
            EntityKind.TASKS,
            draft.to_row(),
        )

    async def update_task(self, task_id: str, patch: TaskPatch) -> MutationResult:
        """patch で指定されたフィールドだけを更新する"""
        fields = patch.fields()
        if not fields:
            logger.debug("Empty patch for task %s, nothing to write", task_id)
            return MutationResult()
        return await self._write_then_refresh(
            EntityKind.TASKS,
            f"update task id={task_id} fields={list(fields)}",
            self._store.update,
            EntityKind.TASKS,
            task_id,
            patch.to_row(),
        )

    async def delete_task(self, task_id: str) -> MutationResult:
        """タスクを削除（存在しないIDの削除は成功扱い）"""
        return await self._write_then_refresh(
            EntityKind.TASKS,
            f"delete task id={task_id}",
            self._store.delete,
            EntityKind.TASKS,
            task_id,
        )

    async def toggle_task(self, task_id: str) -> MutationResult:
        """
        キャッシュ上の完了フラグを反転して update_task する。

        キャッシュにないID（削除済み等）は何もせず成功を返す。
        """
        task = next((t for t in self._cache.tasks if t.id == task_id), None)
        if task is None:
            logger.debug("Toggle ignored, task %s is not cached", task_id)
            return MutationResult()
        return await self.update_task(
            task_id, TaskPatch(is_completed=not task.is_completed)
        )

    async def _write_then_refresh(
        self,
        kind: EntityKind,
        description: str,
        write: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> MutationResult:
        try:
            await write(*args)
        except RemoteWriteRejectedError as e:
            logger.warning("Remote write rejected (%s): %s", description, e)
            return MutationResult(error=e)
        except Exception as e:
            logger.exception("Remote write failed (%s)", description)
            return MutationResult(error=RemoteWriteRejectedError(str(e)))

        logger.info(
            "Remote write ok (%s), refreshing %s",
            description,
            kind.value,
            extra={"extra_fields": {"entity_kind": kind.value}},
        )
        try:
            await self._cache.invalidate(kind)
        except FetchError as e:
            # 書き込み自体は成功しているが、キャッシュは最新ではない
            logger.warning("Refresh after write failed (%s): %s", description, e)
            return MutationResult(error=e)
        return MutationResult()
