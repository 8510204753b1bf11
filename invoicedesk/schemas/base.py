"""Schema 基础设施."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PayloadSchema(BaseModel):
    """写路径 payload 的基础 schema.

    约定:
    - 默认忽略未知字段, 表单里的隐藏字段(如 csrf_token)不会导致校验失败.
    - schema 负责业务校验与错误文案.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class QuerySchema(BaseModel):
    """读路径 query 参数的基础 schema.

    查询参数同样忽略未知字段, 便于前端追加排序等扩展参数.
    """

    model_config = ConfigDict(extra="ignore")
