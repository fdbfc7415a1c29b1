"""Redis Key 命名规范。

Redis 在本项目中用于：
- 同步任务锁：防止同一数据源被并发同步
- 最近一次同步结果：供健康检查脚本读取
"""


class RedisKeys:
    """Redis Key 命名空间管理。"""

    # lock:{resource}
    LOCK_PREFIX = "lock"

    # sync:last:{source_name}
    SYNC_LAST_RESULT_PREFIX = "sync:last"

    HEALTH_CHECK_KEY = "health:ping"

    @classmethod
    def lock(cls, resource: str) -> str:
        return f"{cls.LOCK_PREFIX}:{resource}"

    @classmethod
    def sync_lock(cls, source_name: str) -> str:
        """生成数据源同步锁 key（lock:sync:{source_name}）。"""
        return cls.lock(f"sync:{source_name}")

    @classmethod
    def sync_last_result(cls, source_name: str) -> str:
        return f"{cls.SYNC_LAST_RESULT_PREFIX}:{source_name}"
