#!/usr/bin/env python
"""初始化种子数据：GitHub 数据源与标签体系。

已存在的记录保持不变，可重复执行。

用法:
    uv run python scripts/seed_data.py
"""

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


# (name, display_name, description, color, is_featured)
FRAMEWORK_TAGS = [
    ("langchain", "LangChain", "LLM应用开发框架", "#FF6B35", True),
    ("llamaindex", "LlamaIndex", "数据框架连接LLM", "#8B5CF6", True),
    ("autogen", "AutoGen", "多Agent对话框架", "#10B981", True),
    ("crewai", "CrewAI", "AI Agent协作平台", "#F59E0B", True),
    ("langgraph", "LangGraph", "Agent工作流编排", "#EF4444", True),
    ("transformers", "Transformers", "HuggingFace模型库", "#6366F1", True),
]

APPLICATION_TAGS = [
    ("code-generation", "代码生成", "AI代码生成工具", "#EC4899", False),
    ("chatbot", "聊天机器人", "对话系统和聊天机器人", "#14B8A6", False),
    ("rag", "RAG系统", "检索增强生成系统", "#F97316", False),
    ("agent-tools", "Agent工具", "AI智能体工具集", "#84CC16", False),
    ("content-generation", "内容生成", "AI内容创作工具", "#8B5CF6", False),
    ("data-analysis", "数据分析", "AI数据分析工具", "#06B6D4", False),
]

TECHNOLOGY_TAGS = [
    ("openai-api", "OpenAI API", "OpenAI API集成", "#00A67E", False),
    ("huggingface", "HuggingFace", "HF模型和工具", "#FF9D00", False),
    ("vector-database", "向量数据库", "向量存储和检索", "#7C3AED", False),
    ("fine-tuning", "模型微调", "LLM模型微调", "#DC2626", False),
    ("prompt-engineering", "提示工程", "Prompt优化技术", "#059669", False),
]


async def seed() -> None:
    from loguru import logger

    from src.core.domain.exceptions import DuplicateEntityError
    from src.core.infrastructure.database.session import get_async_session
    from src.modules.items.domain.entities import TagCategory
    from src.modules.items.infrastructure.dependencies import build_tag_service
    from src.modules.sources.domain.entities import DataSource, SourceType
    from src.modules.sources.infrastructure.dependencies import (
        build_source_repository,
    )

    async with get_async_session() as session:
        source_repo = build_source_repository(session)
        if await source_repo.get_by_name("github") is None:
            await source_repo.create(
                DataSource(
                    name="github",
                    type=SourceType.REPOSITORY,
                    display_name="GitHub",
                    base_url="https://api.github.com",
                    api_config={"rate_limit": 5000, "timeout": 30},
                    update_frequency_hours=24,
                    is_active=True,
                )
            )
            await session.commit()
            logger.info("Created data source: github")
        else:
            logger.info("Data source already exists: github")

        tag_service = build_tag_service(session)
        groups = [
            (TagCategory.FRAMEWORK, FRAMEWORK_TAGS),
            (TagCategory.APPLICATION, APPLICATION_TAGS),
            (TagCategory.TECHNOLOGY, TECHNOLOGY_TAGS),
        ]
        for category, tags in groups:
            for sort_order, (name, display_name, description, color, featured) in enumerate(tags):
                try:
                    await tag_service.create_tag(
                        name=name,
                        category=category,
                        display_name=display_name,
                        description=description,
                        color=color,
                        sort_order=sort_order,
                        is_featured=featured,
                    )
                    logger.info(f"Created {category.value} tag: {display_name}")
                except DuplicateEntityError:
                    logger.debug(f"Tag already exists: {name}")

    logger.info("Seed data ready")


def main() -> None:
    from src.core.infrastructure.logging import setup_logging

    setup_logging()
    asyncio.run(seed())


if __name__ == "__main__":
    main()
