# tests/unit/conftest.py
"""单元测试专用 fixtures.

提供环境隔离与写服务测试用的桩对象.
"""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 强制注入隔离环境变量.

    目标:
    - unit tests 不依赖外部 Redis/数据库等基础设施
    - 避免开发者本机环境变量影响测试稳定性
    """
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("CACHE_TYPE", "simple")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.delenv("CACHE_REDIS_URL", raising=False)
    monkeypatch.delenv("WTF_CSRF_ENABLED", raising=False)


class StubSession:
    """记录 commit/rollback 次数的会话桩."""

    def __init__(self, *, commit_error: Exception | None = None) -> None:
        self.commits = 0
        self.rollbacks = 0
        self.commit_error = commit_error

    def commit(self) -> None:
        if self.commit_error is not None:
            raise self.commit_error
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


class StubViewCacheService:
    """按代数记录渲染结果与失效路径的缓存服务桩."""

    def __init__(self) -> None:
        self.invalidated: list[str] = []
        self.generations: dict[str, int] = {}
        self.store: dict[tuple[str, int, str], object] = {}

    def current_generation(self, path: str) -> int:
        return self.generations.get(path, 0)

    def invalidate_path(self, path: str) -> bool:
        self.invalidated.append(path)
        self.generations[path] = self.current_generation(path) + 1
        return True

    def get(self, path: str, variant: str = "", *, generation: int | None = None) -> object | None:
        if generation is None:
            generation = self.current_generation(path)
        return self.store.get((path, generation, variant))

    def set(
        self,
        path: str,
        variant: str,
        value: object,
        timeout: int | None = None,  # noqa: ARG002
        *,
        generation: int | None = None,
    ) -> bool:
        if generation is None:
            generation = self.current_generation(path)
        self.store[(path, generation, variant)] = value
        return True


@pytest.fixture
def stub_session() -> StubSession:
    return StubSession()


@pytest.fixture
def stub_cache_service() -> StubViewCacheService:
    return StubViewCacheService()
