"""统一时间处理工具模块."""

from __future__ import annotations

from datetime import UTC, date, datetime


class TimeFormats:
    """时间格式常量."""

    DATE_FORMAT = "%Y-%m-%d"


class TimeUtils:
    """统一时间处理工具类.

    "今天"统一按 UTC 计算.
    """

    @staticmethod
    def now() -> datetime:
        """获取当前 UTC 时间."""
        return datetime.now(UTC)

    def today(self) -> date:
        """获取当前 UTC 日期(不含时间部分)."""
        return self.now().date()

    @staticmethod
    def format_date(value: date | datetime | None) -> str | None:
        """将日期格式化为 ``YYYY-MM-DD``,空值原样返回 None."""
        if value is None:
            return None
        return value.strftime(TimeFormats.DATE_FORMAT)


time_utils = TimeUtils()
