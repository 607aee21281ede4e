"""FirebaseTokenAuth のテスト

firebase_admin.auth.verify_id_token をモックして検証する。
"""

from unittest.mock import patch

import firebase_admin.auth as fb_auth
import pytest

from futari.adapters.firebase_auth import FirebaseTokenAuth
from futari.domain.errors import SessionResolutionError
from futari.domain.models import Identity

_VERIFY = "firebase_admin.auth.verify_id_token"

_DECODED = {"uid": "uid-husband", "email": "taro@example.com", "name": "太郎"}


class TestFirebaseTokenAuth:
    """FirebaseTokenAuth の単体テスト"""

    @pytest.mark.asyncio
    async def test_no_token_means_no_identity(self):
        auth = FirebaseTokenAuth()

        assert await auth.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_sign_in_notifies_subscribers(self):
        auth = FirebaseTokenAuth()
        seen = []
        auth.subscribe(seen.append)

        with patch(_VERIFY, return_value=_DECODED) as verify:
            identity = await auth.sign_in("id-token")

        verify.assert_called_once_with("id-token", None)
        assert identity == Identity(uid="uid-husband", email="taro@example.com", display_name="太郎")
        assert seen == [identity]

    @pytest.mark.asyncio
    async def test_current_identity_verifies_held_token(self):
        auth = FirebaseTokenAuth()
        with patch(_VERIFY, return_value=_DECODED):
            await auth.sign_in("id-token")
            identity = await auth.get_current_identity()

        assert identity.uid == "uid-husband"

    @pytest.mark.asyncio
    async def test_invalid_token_raises_session_resolution_error(self):
        auth = FirebaseTokenAuth()
        seen = []
        auth.subscribe(seen.append)

        with patch(_VERIFY, side_effect=fb_auth.InvalidIdTokenError("bad token")):
            with pytest.raises(SessionResolutionError):
                await auth.sign_in("bad-token")

        assert seen == []
        assert await auth.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_refresh_and_sign_out_are_notified_in_order(self):
        auth = FirebaseTokenAuth()
        seen = []
        auth.subscribe(seen.append)

        with patch(_VERIFY, return_value=_DECODED):
            await auth.sign_in("token-1")
            await auth.refresh("token-2")
        await auth.sign_out()

        assert [i.uid if i else None for i in seen] == ["uid-husband", "uid-husband", None]
        assert await auth.get_current_identity() is None

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self):
        auth = FirebaseTokenAuth()
        seen = []
        unsubscribe = auth.subscribe(seen.append)

        unsubscribe()
        await auth.sign_out()

        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_others(self):
        auth = FirebaseTokenAuth()
        seen = []

        def broken(_identity):
            raise RuntimeError("listener bug")

        auth.subscribe(broken)
        auth.subscribe(seen.append)
        await auth.sign_out()

        assert seen == [None]
