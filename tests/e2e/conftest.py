"""E2E テスト用フィクスチャ

Firestore Emulator に接続し、実際の FirestoreRemoteStore を使ってテストする。

前提: FIRESTORE_EMULATOR_HOST 環境変数が設定されていること
  例: FIRESTORE_EMULATOR_HOST=localhost:8080 pytest tests/e2e/ -m e2e -v
"""

from __future__ import annotations

import os

import pytest
from google.cloud import firestore

from futari.adapters.firestore_store import FirestoreRemoteStore
from futari.domain.models import EntityKind

TEST_PROJECT = "futari-test"


def pytest_collection_modifyitems(config, items):
    if os.environ.get("FIRESTORE_EMULATOR_HOST"):
        return
    skip = pytest.mark.skip(reason="FIRESTORE_EMULATOR_HOST is not set")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(scope="session")
def firestore_client():
    """後片付け用の同期クライアント（セッション共有）"""
    return firestore.Client(project=TEST_PROJECT)


@pytest.fixture(autouse=True)
def _cleanup_firestore(firestore_client):
    """各テスト後に Emulator のデータを削除する"""
    yield
    for kind in EntityKind:
        for doc in firestore_client.collection(kind.value).stream():
            doc.reference.delete()


@pytest.fixture
def firestore_store() -> FirestoreRemoteStore:
    """Emulator に接続した FirestoreRemoteStore（テストごとに新しい AsyncClient）"""
    return FirestoreRemoteStore(firestore.AsyncClient(project=TEST_PROJECT))
