import pytest
from coordconv import create_app

@pytest.fixture
def app():
    """
    创建一个使用 testing 配置的应用实例。
    """
    app = create_app('testing', config_overrides={
        'TESTING': True,
    })
    yield app

@pytest.fixture
def client(app):
    """为应用创建一个测试客户端"""
    return app.test_client()

# 覆盖中国外包矩形内部、远离边界的一组网格点 (lat, lng)
CHINA_GRID = [
    (lat, lng)
    for lat in (18.5, 22.3, 30.0, 39.9, 45.7, 53.0)
    for lng in (75.5, 88.1, 103.8, 116.4, 121.5, 134.0)
]

@pytest.fixture
def china_grid():
    return list(CHINA_GRID)
