#!/usr/bin/env python
"""同步 GitHub 趋势 AI/LLM 项目。

抓取 -> 去重 -> 分类 -> 入库，持锁清理过期数据后打印统计。

用法:
    uv run python scripts/sync_trending.py [--timespan daily|weekly|monthly]
        [--dry-run] [--verbose] [--skip-cleanup]

退出码:
    0  成功（或同步锁被占用而跳过）
    1  存在处理失败的条目，或整体同步失败
"""

import argparse
import asyncio
import sys
from pathlib import Path


def _ensure_project_root_on_path() -> None:
    """确保项目根目录在 Python 路径中，便于直接运行脚本。"""
    project_root = Path(__file__).parent.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_path()


async def print_stats() -> None:
    """打印仓库统计。"""
    from src.core.infrastructure.database.session import get_async_session
    from src.modules.items.infrastructure.dependencies import (
        build_item_query_service,
        build_tag_service,
    )

    async with get_async_session() as session:
        stats = await build_item_query_service(session).get_stats()
        tag_stats = await build_tag_service(session).get_tag_stats(limit=5)

    print("\nRepository stats:")
    print(f"  Total items: {stats.total}")
    print(f"  Added today: {stats.today}")
    print("  Top categories:")
    for i, bucket in enumerate(stats.top_categories[:5], start=1):
        print(f"    {i}. {bucket.name}: {bucket.count}")
    print("  Top tags:")
    for i, bucket in enumerate(tag_stats, start=1):
        print(f"    {i}. {bucket.name}: {bucket.count}")


async def run(args: argparse.Namespace) -> int:
    from loguru import logger

    from src.core.domain.exceptions import DomainException
    from src.modules.sources.application.ingestion_service import SyncOptions
    from src.modules.sources.domain.entities import Timespan
    from src.modules.sources.tasks import run_sync_pipeline

    options = SyncOptions(
        timespan=Timespan(args.timespan),
        dry_run=args.dry_run,
        verbose=args.verbose,
        skip_cleanup=args.skip_cleanup,
    )

    print(f"Syncing {options.timespan.value} trending items from {options.source_name}...")
    if options.dry_run:
        print("DRY RUN: nothing will be written")

    try:
        result = await run_sync_pipeline(options)
    except DomainException as e:
        logger.error(f"Sync failed [{e.error_code}]: {e.message}")
        return 1

    if result is None:
        print("Another sync for this source is running; skipped.")
        return 0

    print("\nSync summary:")
    print(f"  Fetched:   {result.fetched}")
    print(f"  Processed: {result.processed}")
    print(f"  Relevant:  {result.relevant}")
    print(f"  Errors:    {result.errors}")
    print(f"  Relevance rate: {result.relevance_rate * 100:.1f}%")
    print(f"  Duration: {result.duration_ms} ms")

    if result.retention is not None:
        cleanup = result.retention
        print(
            f"\nCleanup: removed {cleanup['deleted_items']} stale items, "
            f"{cleanup['deleted_tags']} unused tags"
        )

    await print_stats()

    return 1 if result.has_errors else 0


def main() -> None:
    from src.core.infrastructure.logging import setup_logging

    parser = argparse.ArgumentParser(description="同步 GitHub 趋势 AI/LLM 项目")
    parser.add_argument(
        "--timespan",
        choices=["daily", "weekly", "monthly"],
        default="daily",
        help="时间范围 (默认: daily)",
    )
    parser.add_argument("--dry-run", action="store_true", help="预览模式，不实际保存数据")
    parser.add_argument("--verbose", action="store_true", help="详细输出")
    parser.add_argument(
        "--skip-cleanup", action="store_true", help="同步后不执行过期数据清理"
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
