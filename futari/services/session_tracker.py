"""SessionTracker - 認証セッションの追跡

AuthProvider を監視し、現在の Identity と「セッション解決済み」フラグを公開する。
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from futari.domain.models import Identity
from futari.domain.ports import AuthProvider, Unsubscribe

logger = logging.getLogger(__name__)

SessionListener = Callable[[Identity | None], None]


class SessionTracker:
    """
    現在のセッションを1つだけ保持する。

    - start() で変更通知を購読し、既存セッションを1回だけ問い合わせる
    - 通知（サインイン・サインアウト・トークン更新）は全て Identity を丸ごと置き換える
    - ready は初回問い合わせの完了で False → True になり、以後戻らない
    """

    def __init__(self, auth: AuthProvider) -> None:
        self._auth = auth
        self._identity: Identity | None = None
        self._ready = False
        self._unsubscribe: Unsubscribe | None = None
        self._listeners: list[SessionListener] = []
        # 初回問い合わせ中に通知を受けたか（受けた場合は通知の方が新しい）
        self._notified_during_lookup = False

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def ready(self) -> bool:
        return self._ready

    def add_listener(self, listener: SessionListener) -> None:
        """Identity が変わるたび（ready になった時を含む）に呼ばれる"""
        self._listeners.append(listener)

    async def start(self) -> None:
        """購読を開始し、既存セッションを解決する"""
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._auth.subscribe(self._on_auth_change)

        try:
            identity = await self._auth.get_current_identity()
        except Exception as e:
            # セッション解決失敗は致命的ではなく「未認証」として扱う
            logger.warning("Session lookup failed, treating as signed out: %s", e)
            identity = None

        if self._notified_during_lookup:
            logger.debug("Discarding session lookup result superseded by a notification")
        else:
            self._identity = identity
        self._ready = True
        logger.info(
            "Session resolved: uid=%s", self._identity.uid if self._identity else None
        )
        self._emit()

    def close(self) -> None:
        """購読を解除する"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.debug("Session subscription released")

    def _on_auth_change(self, identity: Identity | None) -> None:
        if not self._ready:
            self._notified_during_lookup = True
        self._identity = identity
        logger.info("Session changed: uid=%s", identity.uid if identity else None)
        if self._ready:
            self._emit()

    def _emit(self) -> None:
        for listener in list(self._listeners):
            listener(self._identity)
