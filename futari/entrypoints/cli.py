#!/usr/bin/env python3
"""CLI Entrypoint - 今日のシフトと家事を表示する

使い方:
    python -m futari.entrypoints.cli today
    python -m futari.entrypoints.cli week --offset 1

環境変数:
    PROJECT_ID: GCP プロジェクトID（必須）
    FIREBASE_ID_TOKEN: サインインに使う Firebase ID トークン（必須）
    TIMEZONE: 「今日」を決めるタイムゾーン デフォルト: Asia/Tokyo
    LOG_LEVEL: ログレベル デフォルト: INFO（--verbose 指定時は DEBUG）
"""

import argparse
import asyncio
import logging
import sys
from datetime import date

from futari.config import AppConfig
from futari.domain.models import Role
from futari.entrypoints.factory import create_household_store
from futari.logging_config import setup_logging
from futari.services import views
from futari.services.household_store import HouseholdStore

logger = logging.getLogger(__name__)


def render_today(household: HouseholdStore) -> list[str]:
    """今日の日付・自分のシフト・パートナーごとのタスクを行のリストにする"""
    today = household.today()
    lines = [views.format_date_ja(today)]

    profile = household.current_profile
    if profile is not None:
        lines.append(f"{profile.name}さん（{profile.role.value}）")

    identity = household.identity
    shift = household.get_shift(identity.uid, today) if identity else None
    if shift is not None:
        lines.append(f"今日のシフト: {shift.shift_type.icon} {shift.shift_type.label}")
    else:
        lines.append("今日のシフト: 未登録")

    profiles = household.cache.profiles
    if not profiles:
        lines.append("プロファイルがまだありません")
        return lines

    for role in (Role.HUSBAND, Role.WIFE):
        member = views.profile_for_role(profiles, role)
        tasks = (
            views.tasks_for_assignee(household.cache.tasks, today, member.id)
            if member
            else []
        )
        done, total = views.completion_summary(tasks)
        lines.append(f"[{role.value}] {done}/{total}")
        for task in tasks:
            mark = "x" if task.is_completed else " "
            minutes = f" ({task.duration_minutes}分)" if task.duration_minutes else ""
            lines.append(f"  [{mark}] {task.title}{minutes}")
    return lines


def render_week(household: HouseholdStore, offset: int = 0) -> list[str]:
    """月曜始まりの1週間分の自分のシフト"""
    identity = household.identity
    dates = views.week_dates(date.fromisoformat(household.today()), offset)
    lines = [f"{dates[0].month}月{dates[0].day}日 - {dates[-1].month}月{dates[-1].day}日"]
    for d in dates:
        date_str = d.isoformat()
        shift = household.get_shift(identity.uid, date_str) if identity else None
        label = f"{shift.shift_type.icon} {shift.shift_type.label}" if shift else "-"
        lines.append(f"{views.format_date_ja(date_str)} {label}")
    return lines


async def run(command: str, offset: int) -> int:
    config = AppConfig.from_env()
    if not config.firebase_id_token:
        logger.error("FIREBASE_ID_TOKEN is not set in environment")
        return 1

    household, auth = create_household_store(config)
    async with household:
        await auth.sign_in(config.firebase_id_token)
        await household.wait_idle()

        for kind, error in household.cache.errors.items():
            logger.error("Failed to load %s: %s", kind.value, error)

        lines = render_today(household) if command == "today" else render_week(household, offset)
        print("\n".join(lines))
    return 1 if household.cache.errors else 0


def main():
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(description="Show today's shift and chores")
    parser.add_argument("command", choices=["today", "week"], nargs="?", default="today")
    parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Week offset from the current week (week command only)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()
    setup_logging("DEBUG" if args.verbose else None)

    try:
        sys.exit(asyncio.run(run(args.command, args.offset)))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
