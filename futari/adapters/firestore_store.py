"""Firestore RemoteStore Adapter

RemoteStore の Firestore 実装（AsyncClient）。

Firestore コレクション構造:
  profiles/{profileId}        ← 世帯メンバー（アカウント作成時に外部で作成）
  shifts/{userId}_{date}      ← シフト（conflict key から決まるID）
  tasks/{taskId}              ← タスク（自動採番）

Firestore には一意制約がないため、upsert は conflict key の値から
ドキュメントIDを決定的に生成して「キーごとに最大1件」を保証する。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from google.api_core import exceptions as gexc
from google.cloud import firestore

from futari.domain.errors import (
    RemoteNotFoundError,
    RemoteStoreError,
    RemoteWriteRejectedError,
)
from futari.domain.models import EntityKind
from futari.domain.ports import RemoteStore, Row

logger = logging.getLogger(__name__)

_CREATED_AT = "created_at"
_UPDATED_AT = "updated_at"


def _sort_key(row: Row, order_by: str) -> tuple:
    value = row.get(order_by)
    return (value is None, value if value is not None else "", row["id"])


class FirestoreRemoteStore(RemoteStore):
    """
    Firestore を使った RemoteStore 実装。

    エンティティ種別ごとにトップレベルコレクションを1つ持つ。
    """

    def __init__(self, db: firestore.AsyncClient) -> None:
        """
        Args:
            db: 初期化済みの Firestore AsyncClient
        """
        self._db = db

    async def list(self, kind: EntityKind, order_by: str) -> list[Row]:
        """
        コレクションの全ドキュメントを order_by 昇順で取得。

        Firestore の order_by はフィールドを持たないドキュメントを除外するため、
        全件を取得してからクライアント側で並べる（欠損は末尾、同順位はID順）。
        """
        try:
            rows = [
                {**(snap.to_dict() or {}), "id": snap.id}
                async for snap in self._db.collection(kind.value).stream()
            ]
        except gexc.GoogleAPIError as e:
            raise RemoteStoreError(f"list {kind.value} failed: {e}") from e
        rows.sort(key=lambda row: _sort_key(row, order_by))
        logger.debug("Listed %s: %d rows", kind.value, len(rows))
        return rows

    async def insert(self, kind: EntityKind, row: Row) -> str:
        """自動採番IDでドキュメントを作成。IDを返す"""
        ref = self._db.collection(kind.value).document()
        try:
            await ref.set({**row, _CREATED_AT: firestore.SERVER_TIMESTAMP})
        except gexc.GoogleAPIError as e:
            raise RemoteWriteRejectedError(f"insert {kind.value} failed: {e}") from e
        logger.info("Inserted %s: id=%s", kind.value, ref.id)
        return ref.id

    async def update(self, kind: EntityKind, row_id: str, partial_row: Row) -> None:
        """指定カラムのみ更新。ドキュメントがなければ RemoteNotFoundError"""
        ref = self._db.collection(kind.value).document(row_id)
        try:
            await ref.update({**partial_row, _UPDATED_AT: firestore.SERVER_TIMESTAMP})
        except gexc.NotFound as e:
            raise RemoteNotFoundError(f"{kind.value}/{row_id} not found") from e
        except gexc.GoogleAPIError as e:
            raise RemoteWriteRejectedError(f"update {kind.value} failed: {e}") from e
        logger.info(
            "Updated %s: id=%s, fields=%s", kind.value, row_id, sorted(partial_row)
        )

    async def delete(self, kind: EntityKind, row_id: str) -> None:
        """ドキュメントを削除（存在しなくてもエラーにならない）"""
        ref = self._db.collection(kind.value).document(row_id)
        try:
            await ref.delete()
        except gexc.GoogleAPIError as e:
            raise RemoteWriteRejectedError(f"delete {kind.value} failed: {e}") from e
        logger.info("Deleted %s: id=%s", kind.value, row_id)

    async def upsert(
        self, kind: EntityKind, row: Row, conflict_keys: Sequence[str]
    ) -> None:
        """conflict key から決まるIDのドキュメントを作成または置き換える"""
        doc_id = self._conflict_doc_id(row, conflict_keys)
        ref = self._db.collection(kind.value).document(doc_id)
        try:
            await ref.set(
                {**row, _UPDATED_AT: firestore.SERVER_TIMESTAMP}, merge=True
            )
        except gexc.GoogleAPIError as e:
            raise RemoteWriteRejectedError(f"upsert {kind.value} failed: {e}") from e
        logger.info("Upserted %s: id=%s", kind.value, doc_id)

    # ── 変換ヘルパー ──────────────────────────────────────────────────────────

    @staticmethod
    def _conflict_doc_id(row: Row, conflict_keys: Sequence[str]) -> str:
        """conflict key の値を連結したドキュメントID（"/" はパス区切りなので置換）"""
        if not conflict_keys:
            raise RemoteWriteRejectedError("upsert requires at least one conflict key")
        parts: list[Any] = []
        for key in conflict_keys:
            value = row.get(key)
            if value in (None, ""):
                raise RemoteWriteRejectedError(f"conflict key {key!r} is missing")
            parts.append(str(value).replace("/", "_"))
        return "_".join(parts)
