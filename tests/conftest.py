"""共通テストフィクスチャ

インメモリの FakeRemoteStore / FakeAuthProvider と、
夫・妻2人分のプロファイルを持つサンプル世帯を提供する。
"""

import pytest
import pytest_asyncio

from futari.domain.models import EntityKind, Identity
from futari.services.household_store import HouseholdStore
from tests.fakes import (
    HUSBAND_PROFILE_ID,
    HUSBAND_UID,
    WIFE_PROFILE_ID,
    WIFE_UID,
    FakeAuthProvider,
    FakeRemoteStore,
)


# ========== サンプルデータ ==========


@pytest.fixture
def husband_identity() -> Identity:
    """サンプルセッション: 夫"""
    return Identity(uid=HUSBAND_UID, email="taro@example.com", display_name="太郎")


@pytest.fixture
def wife_identity() -> Identity:
    """サンプルセッション: 妻"""
    return Identity(uid=WIFE_UID, email="hanako@example.com", display_name="花子")


# ========== フェイク ==========


@pytest.fixture
def remote() -> FakeRemoteStore:
    """夫・妻のプロファイルが登録済みの FakeRemoteStore"""
    store = FakeRemoteStore()
    store.seed(
        EntityKind.PROFILES,
        {"id": HUSBAND_PROFILE_ID, "user_id": HUSBAND_UID, "name": "太郎", "role": "夫"},
    )
    store.seed(
        EntityKind.PROFILES,
        {"id": WIFE_PROFILE_ID, "user_id": WIFE_UID, "name": "花子", "role": "妻"},
    )
    return store


@pytest.fixture
def auth(husband_identity) -> FakeAuthProvider:
    """夫としてサインイン済みの FakeAuthProvider"""
    return FakeAuthProvider(husband_identity)


@pytest_asyncio.fixture
async def household(remote, auth):
    """開始済みで初回取得まで完了した HouseholdStore"""
    store = HouseholdStore(remote, auth)
    await store.start()
    await store.wait_idle()
    yield store
    store.close()
