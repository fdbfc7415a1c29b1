#!/usr/bin/env python3
"""健康检查脚本。

检查数据库、Redis 与 GitHub 连通性，并读取最近一次同步结果。
可作为运维脚本或监控探针使用。

使用方式：
    # 完整健康检查
    python scripts/health_check.py

    # 只检查特定组件
    python scripts/health_check.py --component database
    python scripts/health_check.py --component github

    # JSON 输出
    python scripts/health_check.py --json

    # 退出码检查（用于 CI/CD）
    python scripts/health_check.py --strict
"""

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


def _status_of(ok: bool) -> str:
    return "healthy" if ok else "unhealthy"


async def check_database() -> dict:
    """检查数据库连接。"""
    from src.core.infrastructure.database.session import check_db_health
    from src.core.infrastructure.health import HealthStatus

    result = await check_db_health()
    return {"status": _status_of(result.status == HealthStatus.OK), **result.to_dict()}


async def check_redis() -> dict:
    """检查 Redis 连接。"""
    from src.core.infrastructure.health import HealthStatus
    from src.core.infrastructure.redis.client import RedisClient

    redis_client = RedisClient()
    try:
        result = await redis_client.health_check()
    finally:
        await redis_client.close()
    return {"status": _status_of(result.status == HealthStatus.OK), **result.to_dict()}


async def check_github() -> dict:
    """检查 GitHub API 连通性。"""
    from src.core.infrastructure.health import HealthStatus, SourceHealthResult
    from src.modules.sources.infrastructure.connectors.github import GitHubConnector

    connector = GitHubConnector()
    try:
        reachable = await connector.test_connection()
    finally:
        await connector.aclose()

    result = SourceHealthResult(
        status=HealthStatus.OK if reachable else HealthStatus.ERROR,
        source_name=GitHubConnector.source_name,
        reachable=reachable,
    )
    return {"status": _status_of(reachable), **result.to_dict()}


async def check_last_sync() -> dict:
    """读取最近一次同步结果。"""
    from src.core.config import settings
    from src.core.infrastructure.redis import RedisKeys, get_async_redis_client

    async with get_async_redis_client() as redis_client:
        last = await redis_client.get_json(
            RedisKeys.sync_last_result(settings.SYNC_SOURCE_NAME)
        )

    if last is None:
        return {"status": "warning", "message": "No sync result recorded yet"}
    status = "warning" if last.get("errors", 0) > 0 else "healthy"
    return {"status": status, **last}


CHECKERS = {
    "database": check_database,
    "redis": check_redis,
    "github": check_github,
    "last_sync": check_last_sync,
}


async def run_full_check() -> dict:
    """运行完整健康检查。"""
    results = {
        "timestamp": datetime.now(UTC).isoformat(),
        "overall_status": "healthy",
        "components": {},
    }

    # 并行执行所有检查
    outcomes = await asyncio.gather(
        *(checker() for checker in CHECKERS.values()),
        return_exceptions=True,
    )
    for name, outcome in zip(CHECKERS, outcomes, strict=True):
        results["components"][name] = (
            {"status": "error", "error": str(outcome)}
            if isinstance(outcome, Exception)
            else outcome
        )

    # 确定整体状态
    statuses = [c.get("status", "unknown") for c in results["components"].values()]

    if any(s in ("unhealthy", "error") for s in statuses):
        results["overall_status"] = "unhealthy"
    elif any(s == "warning" for s in statuses):
        results["overall_status"] = "degraded"

    return results


async def run_component_check(component: str) -> dict:
    """运行单个组件检查。"""
    try:
        result = await CHECKERS[component]()
    except Exception as e:
        result = {"status": "error", "error": str(e)}
    return {
        "timestamp": datetime.now(UTC).isoformat(),
        "component": component,
        "result": result,
    }


def _emoji(status: str) -> str:
    if status == "healthy":
        return "✅"
    if status in ("warning", "degraded"):
        return "⚠️"
    return "❌"


def print_result(result: dict, json_output: bool = False):
    """打印检查结果。"""
    if json_output:
        print(json.dumps(result, indent=2, default=str))
        return

    print(f"\n{'=' * 60}")
    print(f"Health Check Report - {result.get('timestamp', 'N/A')}")
    print(f"{'=' * 60}")

    if "overall_status" in result:
        overall = result["overall_status"]
        print(f"\nOverall Status: {_emoji(overall)} {overall.upper()}")

        print(f"\n{'-' * 40}")
        for component, info in result.get("components", {}).items():
            comp_status = info.get("status", "unknown")
            print(f"{_emoji(comp_status)} {component}: {comp_status}")

            # 打印额外信息
            if comp_status != "healthy":
                for key, value in info.items():
                    if key != "status":
                        print(f"    {key}: {value}")

    elif "result" in result:
        info = result["result"]
        comp_status = info.get("status", "unknown")
        print(f"\n{result.get('component', 'Component')}: {_emoji(comp_status)} {comp_status}")

        for key, value in info.items():
            if key != "status":
                print(f"  {key}: {value}")

    print(f"\n{'=' * 60}\n")


def main():
    """主函数。"""
    parser = argparse.ArgumentParser(description="系统健康检查脚本")
    parser.add_argument(
        "--component",
        "-c",
        type=str,
        choices=list(CHECKERS),
        help="只检查特定组件",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="输出 JSON 格式",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="严格模式：任何非 healthy 状态都返回非零退出码",
    )

    args = parser.parse_args()

    if args.component:
        result = asyncio.run(run_component_check(args.component))
    else:
        result = asyncio.run(run_full_check())

    print_result(result, args.json)

    # 确定退出码
    if args.strict:
        overall = result.get("overall_status", result.get("result", {}).get("status", "unknown"))
        if overall != "healthy":
            sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
