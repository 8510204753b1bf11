# tests/unit/routes/conftest.py
"""路由契约测试专用 fixtures.

提供基于内存 SQLite 的应用、测试客户端与客户种子数据.
"""

import pytest

from invoicedesk import create_app, db
from invoicedesk.models import Customer
from invoicedesk.settings import Settings


@pytest.fixture(scope="function")
def app(monkeypatch):
    """创建测试应用实例并建表."""
    monkeypatch.setenv("FLASK_ENV", "testing")
    monkeypatch.setenv("CACHE_TYPE", "simple")
    monkeypatch.delenv("CACHE_REDIS_URL", raising=False)

    settings = Settings.load()
    app = create_app(settings=settings)
    app.config["TESTING"] = True

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """创建测试客户端."""
    return app.test_client()


@pytest.fixture(scope="function")
def customers(app):
    """写入两位客户,返回 (evil_rabbit, delba) 的 id."""
    evil_rabbit = Customer(name="Evil Rabbit", email="evil@rabbit.com", image_url="/customers/evil-rabbit.png")
    delba = Customer(name="Delba de Oliveira", email="delba@oliveira.com")
    db.session.add_all([evil_rabbit, delba])
    db.session.commit()
    return evil_rabbit.id, delba.id
