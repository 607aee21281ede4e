"""設定管理 - 環境変数の型安全な読み込み"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv


@dataclass(frozen=True)
class AppConfig:
    """アプリケーション設定"""
    project_id: str
    firestore_database: str = "(default)"
    timezone: str = "Asia/Tokyo"
    firebase_id_token: str = ""

    @classmethod
    def from_env(cls) -> "AppConfig":
        """環境変数から設定を読み込む"""
        load_dotenv()

        project_id = os.getenv("PROJECT_ID")
        if not project_id:
            raise ValueError("PROJECT_ID is not set in environment")

        return cls(
            project_id=project_id,
            firestore_database=os.getenv("FIRESTORE_DATABASE", "(default)"),
            timezone=os.getenv("TIMEZONE", "Asia/Tokyo"),
            firebase_id_token=os.getenv("FIREBASE_ID_TOKEN", ""),
        )
