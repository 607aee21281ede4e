"""Factory - 依存性注入の組み立て

Firestore / Firebase の Adapter を生成し、HouseholdStore を組み立てる。
"""

import logging

from google.cloud import firestore

from futari.adapters.firebase_auth import FirebaseTokenAuth, get_firebase_app
from futari.adapters.firestore_store import FirestoreRemoteStore
from futari.config import AppConfig
from futari.services.household_store import HouseholdStore

logger = logging.getLogger(__name__)


def create_household_store(
    config: AppConfig | None = None,
) -> tuple[HouseholdStore, FirebaseTokenAuth]:
    """
    HouseholdStore を生成（全依存を組み立て）。

    Args:
        config: アプリケーション設定（Noneの場合は環境変数から読み込み）

    Returns:
        (HouseholdStore, FirebaseTokenAuth): サインイン操作のため認証Adapterも返す

    Raises:
        ValueError: 必須設定が不足している場合
    """
    if config is None:
        config = AppConfig.from_env()

    logger.info(
        "Creating household store: project_id=%s, database=%s",
        config.project_id,
        config.firestore_database,
    )

    db = firestore.AsyncClient(
        project=config.project_id, database=config.firestore_database
    )
    auth = FirebaseTokenAuth(app=get_firebase_app(config.project_id))
    household = HouseholdStore(
        store=FirestoreRemoteStore(db),
        auth=auth,
        timezone=config.timezone,
    )
    return household, auth
