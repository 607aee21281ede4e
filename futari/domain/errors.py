"""ドメイン固有の例外クラス"""


class SyncError(Exception):
    """futari 同期コアの基底例外"""

    pass


class InvalidValueError(SyncError, ValueError):
    """列挙値・必須フィールドの不正（構築時に拒否）"""

    pass


class SessionResolutionError(SyncError):
    """認証セッションの解決失敗（識別子なしとして扱う）"""

    pass


class FetchError(SyncError):
    """リモートストアからの一覧取得失敗"""

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind
        self.message = message


class RemoteStoreError(SyncError):
    """リモートストア呼び出しの失敗（ネットワーク・制約違反等）"""

    pass


class RemoteWriteRejectedError(RemoteStoreError):
    """書き込み（insert/update/delete/upsert）がリモートに拒否された"""

    pass


class RemoteNotFoundError(RemoteWriteRejectedError):
    """更新対象の行が存在しない"""

    pass
