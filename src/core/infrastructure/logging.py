"""Logging configuration with structlog integration.

提供两种日志记录方式：
1. loguru: 用于一般调试日志
2. structlog: 用于关键业务事件的结构化日志
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    # 本地开发使用人类可读格式，其他环境输出 JSON
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/trendscope_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    """将日志级别字符串转换为数字。"""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# 业务事件日志记录器
# ============================================================================


def get_business_logger() -> structlog.BoundLogger:
    """获取业务事件日志记录器。

    Usage:
        log = get_business_logger()
        log.info("sync_job_completed", job_id="...", processed=12)
    """
    return structlog.get_logger("business")


class BusinessEvents:
    """业务事件日志助手类。

    同步任务、条目入库、保留清理等关键事件统一从这里输出，保证字段一致。

    Usage:
        BusinessEvents.sync_job_started(job_id="...", source_name="github", timespan="daily")
        BusinessEvents.item_ingested(source_id="...", item_id="...", url="...")
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def sync_job_started(
        cls,
        job_id: str,
        source_name: str,
        timespan: str,
        dry_run: bool,
        **extra: Any,
    ) -> None:
        """记录同步任务开始事件。"""
        cls._log.info(
            "sync_job_started",
            event_type="sync",
            job_id=job_id,
            source_name=source_name,
            timespan=timespan,
            dry_run=dry_run,
            **extra,
        )

    @classmethod
    def sync_job_completed(
        cls,
        job_id: str,
        fetched: int,
        processed: int,
        relevant: int,
        errors: int,
        **extra: Any,
    ) -> None:
        """记录同步任务完成事件。"""
        level = "info" if errors == 0 else "warning"
        getattr(cls._log, level)(
            "sync_job_completed",
            event_type="sync",
            job_id=job_id,
            fetched=fetched,
            processed=processed,
            relevant=relevant,
            errors=errors,
            **extra,
        )

    @classmethod
    def sync_job_failed(
        cls,
        job_id: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录同步任务失败事件。"""
        cls._log.error(
            "sync_job_failed",
            event_type="sync_error",
            job_id=job_id,
            error=error,
            **extra,
        )

    @classmethod
    def sync_skipped(
        cls,
        source_name: str,
        reason: str,
        **extra: Any,
    ) -> None:
        """记录同步被跳过事件（锁被占用等）。"""
        cls._log.info(
            "sync_skipped",
            event_type="sync",
            source_name=source_name,
            reason=reason,
            **extra,
        )

    @classmethod
    def item_ingested(
        cls,
        source_id: str,
        item_id: str,
        url: str,
        **extra: Any,
    ) -> None:
        """记录 Item 入库事件。"""
        cls._log.info(
            "item_ingested",
            event_type="ingest",
            source_id=source_id,
            item_id=item_id,
            url=url,
            **extra,
        )

    @classmethod
    def item_skipped(
        cls,
        external_id: str,
        relevance: float,
        **extra: Any,
    ) -> None:
        """记录 Item 因相关性不足被跳过。"""
        cls._log.debug(
            "item_skipped",
            event_type="classify",
            external_id=external_id,
            relevance=round(relevance, 4),
            **extra,
        )

    @classmethod
    def item_processing_failed(
        cls,
        external_id: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录单个 Item 处理失败事件。"""
        cls._log.warning(
            "item_processing_failed",
            event_type="ingest_error",
            external_id=external_id,
            error=error,
            **extra,
        )

    @classmethod
    def source_fetch_failed(
        cls,
        source_id: str,
        error: str,
        **extra: Any,
    ) -> None:
        """记录源抓取失败事件。"""
        cls._log.warning(
            "source_fetch_failed",
            event_type="ingest_error",
            source_id=source_id,
            error=error,
            **extra,
        )

    @classmethod
    def retention_swept(
        cls,
        deleted: int,
        max_age_days: int,
        min_popularity: int,
        **extra: Any,
    ) -> None:
        """记录过期数据清理事件。"""
        cls._log.info(
            "retention_swept",
            event_type="retention",
            deleted=deleted,
            max_age_days=max_age_days,
            min_popularity=min_popularity,
            **extra,
        )

    @classmethod
    def feature_degraded(
        cls,
        feature: str,
        reason: str,
        **extra: Any,
    ) -> None:
        """记录功能降级事件。"""
        cls._log.warning(
            "feature_degraded",
            event_type="degradation",
            feature=feature,
            reason=reason,
            **extra,
        )
