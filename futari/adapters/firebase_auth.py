"""Firebase Auth Adapter

AuthProvider の Firebase 実装。
クライアントから受け取った Firebase ID トークンを firebase_admin で検証し、
uid / email / 表示名を Identity として購読者に通知する。
"""

from __future__ import annotations

import asyncio
import logging
import os

import firebase_admin
import firebase_admin.auth as fb_auth
from firebase_admin import credentials as fb_creds

from futari.domain.errors import SessionResolutionError
from futari.domain.models import Identity
from futari.domain.ports import AuthProvider, IdentityCallback, Unsubscribe

logger = logging.getLogger(__name__)

# ── Firebase Admin 初期化（プロセス内で1回のみ） ────────────────────────────────

_firebase_app: firebase_admin.App | None = None


def get_firebase_app(project_id: str | None = None) -> firebase_admin.App:
    global _firebase_app
    if _firebase_app is None:
        try:
            _firebase_app = firebase_admin.get_app()
        except ValueError:
            cred = fb_creds.ApplicationDefault()
            project_id = project_id or os.environ.get("PROJECT_ID")
            _firebase_app = firebase_admin.initialize_app(
                cred,
                options={"projectId": project_id} if project_id else {},
            )
            logger.info("Firebase Admin initialized project=%s", project_id)
    return _firebase_app


class FirebaseTokenAuth(AuthProvider):
    """
    Firebase ID トークンを保持する AuthProvider。

    sign_in / refresh / sign_out のたびに全購読者へ登録順に通知する。
    """

    def __init__(self, app: firebase_admin.App | None = None) -> None:
        """
        Args:
            app: 初期化済みの Firebase App（None の場合は既定アプリ）
        """
        self._app = app
        self._id_token: str | None = None
        self._listeners: list[IdentityCallback] = []

    async def get_current_identity(self) -> Identity | None:
        """保持中のトークンを検証して Identity を返す。トークンがなければ None"""
        if self._id_token is None:
            return None
        return await self._verify(self._id_token)

    def subscribe(self, callback: IdentityCallback) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def sign_in(self, id_token: str) -> Identity:
        """ID トークンでサインインし、購読者に通知する

        Raises:
            SessionResolutionError: トークンが無効な場合
        """
        identity = await self._verify(id_token)
        self._id_token = id_token
        logger.info("Signed in: uid=%s", identity.uid)
        self._notify(identity)
        return identity

    async def refresh(self, id_token: str) -> Identity:
        """トークン更新。サインインと同じく購読者に通知する"""
        identity = await self._verify(id_token)
        self._id_token = id_token
        logger.debug("Token refreshed: uid=%s", identity.uid)
        self._notify(identity)
        return identity

    async def sign_out(self) -> None:
        self._id_token = None
        logger.info("Signed out")
        self._notify(None)

    async def _verify(self, id_token: str) -> Identity:
        # verify_id_token は公開鍵の取得で通信するためスレッドに逃がす
        try:
            decoded = await asyncio.to_thread(
                fb_auth.verify_id_token, id_token, self._app
            )
        except (ValueError, fb_auth.InvalidIdTokenError, fb_auth.CertificateFetchError) as e:
            logger.warning("Invalid Firebase ID token: %s", e)
            raise SessionResolutionError("invalid or expired Firebase ID token") from e
        return Identity(
            uid=decoded["uid"],
            email=decoded.get("email", ""),
            display_name=decoded.get("name", ""),
        )

    def _notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception:
                logger.exception("Session listener failed")
