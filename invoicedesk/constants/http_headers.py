"""HTTP 头常量."""


class HttpHeaders:
    """项目内使用到的 HTTP 头名称."""

    X_REQUEST_ID = "X-Request-ID"
