"""发票台 - 页面缓存服务,基于 Flask-Caching 提供按路径失效的视图缓存.

每个逻辑路径维护一个代数(generation)计数器,缓存键形如
``view:<path>:<generation>:<hash>``.失效时只需递增代数,
该路径下所有查询参数组合的缓存即同时过期,不依赖后端的模式匹配删除.
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Any

from flask_caching import Cache
from redis.exceptions import RedisError

from invoicedesk.utils.structlog_config import get_logger

logger = get_logger("cache_service")

CACHE_EXCEPTIONS: tuple[type[Exception], ...] = (
    AttributeError,
    RuntimeError,
    ValueError,
    TypeError,
    OSError,
    RedisError,
)

DEFAULT_VIEW_TTL_SECONDS = 3600
_GENERATION_PREFIX = "view-gen"
_VIEW_PREFIX = "view"
_GENERATION_SEED_BITS = 48


class ViewCacheService:
    """视图缓存服务.

    Attributes:
        cache: Flask-Caching 实例,未注入时所有读取都视为未命中.
        default_ttl: 缓存渲染结果的默认过期时间(秒).

    """

    def __init__(self, cache: Cache | None = None, *, default_ttl: int = DEFAULT_VIEW_TTL_SECONDS) -> None:
        self.cache = cache
        self.default_ttl = default_ttl

    @staticmethod
    def _generation_key(path: str) -> str:
        return f"{_GENERATION_PREFIX}:{path}"

    def current_generation(self, path: str) -> int:
        """读取路径当前代数.

        代数键缺失时(首次访问或被后端淘汰)以随机数播种,
        重建后的代数不会与已淘汰代数下残留的缓存键重合.
        缓存不可用时返回 0.
        """
        if not self.cache:
            return 0
        generation_key = self._generation_key(path)
        try:
            value = self.cache.get(generation_key)
            if isinstance(value, int):
                return value
            # add 仅在键不存在时写入,并发播种时以先写入者为准
            self.cache.add(generation_key, secrets.randbits(_GENERATION_SEED_BITS), timeout=0)
            value = self.cache.get(generation_key)
        except CACHE_EXCEPTIONS as exc:
            logger.warning("读取缓存代数失败", path=path, error=str(exc))
            return 0
        return value if isinstance(value, int) else 0

    def build_key(self, path: str, variant: str = "", *, generation: int | None = None) -> str:
        """生成缓存键.

        使用 SHA-256 哈希查询参数等变体,确保键名长度可控.

        Args:
            path: 逻辑路径,例如 ``/dashboard/invoices``.
            variant: 同一路径下区分不同渲染结果的字符串(通常为查询参数).
            generation: 已读取的代数;为空时读取当前代数.

        Returns:
            形如 ``view:<path>:<generation>:<hash>`` 的缓存键.

        """
        if generation is None:
            generation = self.current_generation(path)
        variant_hash = hashlib.sha256(variant.encode()).hexdigest()
        return f"{_VIEW_PREFIX}:{path}:{generation}:{variant_hash}"

    def get(self, path: str, variant: str = "", *, generation: int | None = None) -> Any | None:
        """获取缓存的渲染结果.

        Returns:
            缓存值,未命中或出错时返回 None.

        """
        if not self.cache:
            return None
        cache_key = self.build_key(path, variant, generation=generation)
        try:
            cached = self.cache.get(cache_key)
        except CACHE_EXCEPTIONS as exc:
            logger.warning("获取视图缓存失败", path=path, cache_key=cache_key, error=str(exc))
            return None
        if cached is not None:
            logger.debug("视图缓存命中", path=path, cache_key=cache_key)
        return cached

    def set(
        self,
        path: str,
        variant: str,
        value: Any,
        timeout: int | None = None,
        *,
        generation: int | None = None,
    ) -> bool:
        """写入渲染结果.

        渲染前读取的代数应通过 ``generation`` 传回,渲染期间发生的失效
        会让结果落在旧代数下,不会被后续读取命中.

        Returns:
            成功返回 True,失败返回 False.

        """
        if not self.cache:
            return False
        cache_key = self.build_key(path, variant, generation=generation)
        ttl = self.default_ttl if timeout is None else timeout
        try:
            self.cache.set(cache_key, value, timeout=ttl)
        except CACHE_EXCEPTIONS as exc:
            logger.warning("设置视图缓存失败", path=path, cache_key=cache_key, error=str(exc))
            return False
        return True

    def invalidate_path(self, path: str) -> bool:
        """将路径下所有已缓存的渲染结果标记为过期.

        Args:
            path: 逻辑路径.

        Returns:
            成功返回 True;缓存后端异常时记录日志并返回 False.

        """
        if not self.cache:
            return True

        # 先确保代数键已播种,再原子递增 (Redis 下为 INCR)
        self.current_generation(path)
        try:
            next_generation = self.cache.inc(self._generation_key(path))
        except CACHE_EXCEPTIONS as exc:
            logger.warning("视图缓存失效失败", path=path, error=str(exc))
            return False
        if next_generation is None:
            logger.warning("视图缓存失效失败", path=path, error="inc returned None")
            return False

        logger.info("视图缓存已失效", path=path, generation=next_generation)
        return True

    def health_check(self) -> bool:
        """缓存健康检查.

        通过设置和获取测试键来验证缓存是否正常工作.

        Returns:
            如果缓存正常返回 True,否则返回 False.

        """
        if not self.cache:
            return False

        is_healthy = False
        try:
            test_key = "health_check_test"
            test_value = "ok"
            self.cache.set(test_key, test_value, timeout=10)
            result = self.cache.get(test_key)
            self.cache.delete(test_key)
            is_healthy = result == test_value
        except CACHE_EXCEPTIONS as exc:
            logger.warning("缓存健康检查失败", error=str(exc))
        return is_healthy


# 全局视图缓存服务实例
view_cache_service: ViewCacheService = ViewCacheService()


def init_view_cache_service(cache: Cache, *, default_ttl: int = DEFAULT_VIEW_TTL_SECONDS) -> ViewCacheService:
    """初始化视图缓存服务.

    Args:
        cache: Flask-Caching 实例.
        default_ttl: 渲染结果默认过期时间(秒).

    Returns:
        初始化后的 ViewCacheService 实例.

    """
    view_cache_service.cache = cache
    view_cache_service.default_ttl = default_ttl
    logger.info("视图缓存服务初始化完成", default_ttl=default_ttl)
    return view_cache_service


def get_view_cache_service() -> ViewCacheService:
    """返回全局视图缓存服务."""
    return view_cache_service
