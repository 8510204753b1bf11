"""Flask Flash消息类别常量.

定义Flash消息的标准类别,避免魔法字符串.
"""


class FlashCategory:
    """Flask Flash消息类别常量."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
