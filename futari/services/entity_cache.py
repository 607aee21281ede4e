"""EntityCache - エンティティ種別ごとのインメモリキャッシュ

リモートストアを真実とする invalidate-and-refetch 型のミラー。
各コレクションは取得成功のたびに丸ごと置き換えられる（フィールド単位のマージはしない）。
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from futari.domain.errors import FetchError
from futari.domain.models import EntityKind, Identity, Profile, Shift, Task
from futari.domain.ports import RemoteStore, Row
from futari.services.session_tracker import SessionTracker

logger = logging.getLogger(__name__)

# 種別ごとの並び順カラムと行変換
_FETCH_SPECS: dict[EntityKind, tuple[str, Callable[[Row], Any]]] = {
    EntityKind.PROFILES: ("created_at", Profile.from_row),
    EntityKind.SHIFTS: ("date", Shift.from_row),
    EntityKind.TASKS: ("created_at", Task.from_row),
}


@dataclass
class CacheSlice:
    """1種別分のキャッシュ状態"""

    items: tuple = ()
    error: FetchError | None = None
    generation: int = 0
    inflight: asyncio.Task | None = None

    @property
    def loading(self) -> bool:
        return self.inflight is not None


class EntityCache:
    """
    Profile / Shift / Task のコレクションを保持する。

    取得はセッションが解決済みかつ Identity がある場合のみ行う。
    同じ種別への invalidate が重なった場合は最後に開始した取得の結果を
    全ての待機者が観測する（古い取得の結果は捨てる）。
    """

    def __init__(self, store: RemoteStore, session: SessionTracker) -> None:
        self._store = store
        self._session = session
        self._slices = {kind: CacheSlice() for kind in EntityKind}
        self._active_uid: str | None = None
        # 世代が進んで結果を捨てる取得も、終わるまで参照を保持する
        self._superseded: set[asyncio.Task] = set()
        session.add_listener(self._on_session_change)

    # ── 読み取り ──────────────────────────────────────────────────────────────

    @property
    def profiles(self) -> tuple[Profile, ...]:
        return self._slices[EntityKind.PROFILES].items

    @property
    def shifts(self) -> tuple[Shift, ...]:
        return self._slices[EntityKind.SHIFTS].items

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._slices[EntityKind.TASKS].items

    def loading(self, kind: EntityKind) -> bool:
        return self._slices[kind].loading

    def error(self, kind: EntityKind) -> FetchError | None:
        return self._slices[kind].error

    @property
    def errors(self) -> dict[EntityKind, FetchError]:
        return {
            kind: s.error for kind, s in self._slices.items() if s.error is not None
        }

    @property
    def is_loading(self) -> bool:
        return any(s.loading for s in self._slices.values())

    @property
    def enabled(self) -> bool:
        """リモートへの問い合わせが許可されているか"""
        return self._session.ready and self._session.identity is not None

    # ── 無効化・再取得 ────────────────────────────────────────────────────────

    async def invalidate(self, kind: EntityKind) -> tuple:
        """
        種別のコレクションを無効化し、再取得の完了を待つ。

        Returns:
            再取得後のコレクション（未認証なら空）

        Raises:
            FetchError: 最新の取得が失敗した場合
        """
        if not self.enabled:
            logger.debug("Skipping %s fetch: no active session", kind.value)
            return ()
        self._spawn(kind)
        return await self._settle(kind)

    async def wait_idle(self) -> None:
        """進行中の取得が全て終わるまで待つ（失敗は各種別の error に残る）"""
        await asyncio.gather(
            *(self._settle(kind) for kind in EntityKind), return_exceptions=True
        )

    def _spawn(self, kind: EntityKind) -> None:
        cache_slice = self._slices[kind]
        self._retire(cache_slice)
        cache_slice.generation += 1
        cache_slice.inflight = asyncio.get_running_loop().create_task(
            self._fetch(kind, cache_slice.generation),
            name=f"fetch-{kind.value}",
        )

    async def _settle(self, kind: EntityKind) -> tuple:
        cache_slice = self._slices[kind]
        # 待っている間に新しい取得が始まったら、そちらも待つ
        while (task := cache_slice.inflight) is not None:
            await asyncio.wait({task})
            if cache_slice.inflight is task:
                cache_slice.inflight = None
        if (error := cache_slice.error) is not None:
            raise FetchError(error.kind, error.message)
        return cache_slice.items

    async def _fetch(self, kind: EntityKind, generation: int) -> None:
        order_by, from_row = _FETCH_SPECS[kind]
        cache_slice = self._slices[kind]
        logger.info("Fetching %s", kind.value)
        try:
            rows = await self._store.list(kind, order_by)
            items = tuple(from_row(row) for row in rows)
        except Exception as e:
            if cache_slice.generation == generation:
                logger.warning("Fetch %s failed: %s", kind.value, e)
                cache_slice.error = FetchError(kind.value, str(e))
                cache_slice.inflight = None
            return
        if cache_slice.generation != generation:
            logger.debug("Discarding superseded %s fetch", kind.value)
            return
        cache_slice.items = items
        cache_slice.error = None
        cache_slice.inflight = None
        logger.info("Fetched %s: %d items", kind.value, len(items))

    # ── セッション連動 ────────────────────────────────────────────────────────

    def _on_session_change(self, identity: Identity | None) -> None:
        uid = identity.uid if identity else None
        if uid == self._active_uid:
            return
        self._active_uid = uid
        self._reset_all()
        if uid is None:
            logger.info("Session ended, cache cleared")
            return
        logger.info("Session started for uid=%s, populating cache", uid)
        for kind in EntityKind:
            self._spawn(kind)

    def _reset_all(self) -> None:
        for cache_slice in self._slices.values():
            # 進行中の取得は世代が進むので結果が捨てられる
            self._retire(cache_slice)
            cache_slice.generation += 1
            cache_slice.items = ()
            cache_slice.error = None
            cache_slice.inflight = None

    def _retire(self, cache_slice: CacheSlice) -> None:
        """置き換えられる取得タスクを完了まで保持する"""
        task = cache_slice.inflight
        if task is not None and not task.done():
            self._superseded.add(task)
            task.add_done_callback(self._superseded.discard)
