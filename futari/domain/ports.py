"""Ports - 外部コラボレーターのインターフェース定義（ABC）

同期コアが依存するのは以下の2つだけ:
- RemoteStore: 認証済みのテーブルストア（last-write-wins、サーバー側ロジックなし）
- AuthProvider: 認証セッションの取得と変更通知

実装クラス（Adapter）はこれらのABCを継承し、全ての抽象メソッドを実装する必要がある。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any

from futari.domain.models import EntityKind, Identity

Row = dict[str, Any]
IdentityCallback = Callable[[Identity | None], None]
Unsubscribe = Callable[[], None]


class RemoteStore(ABC):
    """エンティティ種別ごとの CRUD + upsert 契約（Firestore等）

    失敗は RemoteStoreError（書き込みは RemoteWriteRejectedError）で通知する。
    """

    @abstractmethod
    async def list(self, kind: EntityKind, order_by: str) -> list[Row]:
        """
        全行を order_by カラムの昇順で取得。各行は "id" キーを含む。

        order_by カラムを持たない行も省かずに末尾に並べる。
        """
        pass

    @abstractmethod
    async def insert(self, kind: EntityKind, row: Row) -> str:
        """行を作成。リモートが採番したIDを返す"""
        pass

    @abstractmethod
    async def update(self, kind: EntityKind, row_id: str, partial_row: Row) -> None:
        """partial_row に含まれるカラムだけを更新。行がなければ RemoteNotFoundError"""
        pass

    @abstractmethod
    async def delete(self, kind: EntityKind, row_id: str) -> None:
        """行を削除。存在しない行の削除は成功扱い"""
        pass

    @abstractmethod
    async def upsert(
        self, kind: EntityKind, row: Row, conflict_keys: Sequence[str]
    ) -> None:
        """conflict_keys の値が一致する行を置き換え、なければ作成"""
        pass


class AuthProvider(ABC):
    """認証コラボレーター（Firebase Auth等）。資格情報の扱いはここに閉じる"""

    @abstractmethod
    async def get_current_identity(self) -> Identity | None:
        """現在のセッションを1回だけ問い合わせる"""
        pass

    @abstractmethod
    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        """サインイン・サインアウト・トークン更新のたびに callback を呼ぶ。解除関数を返す"""
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        """セッションを終了し、購読者に None を通知する"""
        pass
