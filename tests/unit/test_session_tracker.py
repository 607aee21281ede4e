"""SessionTracker のテスト"""

import asyncio

import pytest

from futari.domain.errors import SessionResolutionError
from futari.services.session_tracker import SessionTracker
from tests.fakes import FakeAuthProvider


class TestSessionTracker:
    """SessionTracker の単体テスト"""

    @pytest.mark.asyncio
    async def test_not_ready_before_start(self, auth):
        tracker = SessionTracker(auth)
        assert tracker.ready is False
        assert tracker.identity is None

    @pytest.mark.asyncio
    async def test_start_resolves_existing_session(self, auth, husband_identity):
        """start() で既存セッションを解決し ready になる"""
        tracker = SessionTracker(auth)
        await tracker.start()

        assert tracker.ready is True
        assert tracker.identity == husband_identity
        assert len(auth.listeners) == 1

    @pytest.mark.asyncio
    async def test_lookup_failure_is_treated_as_signed_out(self):
        """問い合わせ失敗は未認証として扱い、ready にはなる"""
        auth = FakeAuthProvider()
        auth.lookup_error = SessionResolutionError("token expired")
        tracker = SessionTracker(auth)

        await tracker.start()

        assert tracker.ready is True
        assert tracker.identity is None

    @pytest.mark.asyncio
    async def test_notifications_replace_identity(self, auth, wife_identity):
        """通知のたびに Identity が置き換わる"""
        tracker = SessionTracker(auth)
        seen = []
        tracker.add_listener(seen.append)
        await tracker.start()

        auth.emit(None)
        auth.emit(wife_identity)

        assert tracker.identity == wife_identity
        assert seen[1:] == [None, wife_identity]

    @pytest.mark.asyncio
    async def test_ready_does_not_flip_back_on_sign_out(self, auth):
        tracker = SessionTracker(auth)
        await tracker.start()

        auth.emit(None)

        assert tracker.ready is True
        assert tracker.identity is None

    @pytest.mark.asyncio
    async def test_notification_during_lookup_wins(self, wife_identity):
        """問い合わせ中に届いた通知は、問い合わせ結果より優先される"""
        auth = FakeAuthProvider()
        auth.lookup_gate = asyncio.Event()
        tracker = SessionTracker(auth)

        start = asyncio.create_task(tracker.start())
        await asyncio.sleep(0)
        assert tracker.ready is False

        auth.emit(wife_identity)
        # 問い合わせは古い状態（未認証）を返す
        auth.identity = None
        auth.lookup_gate.set()
        await start

        assert tracker.ready is True
        assert tracker.identity == wife_identity

    @pytest.mark.asyncio
    async def test_listeners_not_called_before_ready(self, wife_identity):
        auth = FakeAuthProvider()
        auth.lookup_gate = asyncio.Event()
        tracker = SessionTracker(auth)
        seen = []
        tracker.add_listener(seen.append)

        start = asyncio.create_task(tracker.start())
        await asyncio.sleep(0)
        auth.emit(wife_identity)
        assert seen == []

        auth.lookup_gate.set()
        await start
        assert seen == [wife_identity]

    @pytest.mark.asyncio
    async def test_close_releases_subscription(self, auth):
        tracker = SessionTracker(auth)
        await tracker.start()

        tracker.close()

        assert auth.listeners == []
