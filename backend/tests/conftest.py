"""
Image Proxy 测试配置文件

这个文件包含 pytest fixtures（测试夹具）。

关键概念：
- FakeUpstream：假的上游服务，记录每个请求，并按测试设定返回响应
- fetcher：挂载了 httpx.MockTransport 的 UpstreamFetcher，不会访问真实网络
- client：通过 httpx.ASGITransport 直接调用 FastAPI 应用
"""

import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

# 添加 backend 目录到 Python 路径
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from image_proxy import create_app, routes_fastapi
from image_proxy.fetcher import UpstreamFetcher


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
LOGIN_PAGE = b"<html><body>Please log in</body></html>"


# ============================================
# Fake Upstream
# ============================================

class FakeUpstream:
    """
    假的上游服务。

    使用方式：
    ```python
    upstream.responder = lambda request: image_response()
    ```
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(404)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def strategies_seen(self) -> List[str]:
        return [strategy_of(request) for request in self.requests]


def strategy_of(request: httpx.Request) -> str:
    """根据请求特征判断使用的是哪种认证方式"""
    if "authorization" in request.headers:
        return "bearer"
    if "token" in request.url.params:
        return "query-param"
    cookie = request.headers.get("cookie", "")
    if cookie.startswith("token="):
        return "cookie"
    if cookie:
        return "session-cookie"
    return "anonymous"


def image_response(content_type: str = "image/png", body: bytes = PNG_BYTES) -> httpx.Response:
    return httpx.Response(200, headers={"content-type": content_type}, content=body)


def login_page_response() -> httpx.Response:
    return httpx.Response(200, headers={"content-type": "text/html; charset=utf-8"}, content=LOGIN_PAGE)


def redirect_response() -> httpx.Response:
    return httpx.Response(302, headers={"location": "https://auth.example.com/login"})


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def upstream():
    """每个测试一个新的假上游，测试之间互不影响"""
    return FakeUpstream()


@pytest.fixture
async def fetcher(upstream):
    """挂载假上游的 fetcher，测试结束后自动关闭"""
    fetcher = UpstreamFetcher(timeout=5.0, transport=httpx.MockTransport(upstream.handle))
    yield fetcher
    await fetcher.close()


@pytest.fixture
async def client(fetcher, monkeypatch):
    """
    调用 FastAPI 应用的 HTTP 客户端。

    路由模块使用的 upstream_fetcher 会被替换成假上游。
    """
    monkeypatch.setattr(routes_fastapi, "upstream_fetcher", fetcher)
    app = create_app()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


# ============================================
# Helper Functions
# ============================================

def assert_json_error(response: httpx.Response, status_code: int, error_contains=None):
    """
    断言返回了 JSON 错误。

    使用方式：
    ```python
    response = await client.get("/proxy-image")
    assert_json_error(response, 400, "URL")
    ```
    """
    assert response.status_code == status_code, \
        f"Expected {status_code}, got {response.status_code}: {response.text}"
    body = response.json()
    assert "error" in body, f"No error field in: {body}"
    if error_contains:
        assert error_contains.lower() in body["error"].lower(), \
            f"Error should contain '{error_contains}', got: {body['error']}"
    return body
