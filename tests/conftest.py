"""
Shared test fixtures for the Caddyfile test suite.
"""
import json

import pytest


# ==========================================================================
# Caddyfiles
# ==========================================================================

@pytest.fixture
def simple_caddyfile():
    return "example.com {\n  reverse_proxy localhost:8080\n}\n"


@pytest.fixture
def static_site_caddyfile():
    return "a.com {\n  root * /var/www\n  file_server\n}\n"


@pytest.fixture
def full_caddyfile():
    return (
        "# Main site\n"
        "example.com {\n"
        "    encode gzip\n"
        "    root * /srv/www\n"
        "    file_server\n"
        "    header X-Frame-Options DENY\n"
        "    log\n"
        "}\n"
        "\n"
        "api.example.com {\n"
        "    reverse_proxy localhost:3000\n"
        "    tls internal\n"
        "}\n"
    )


@pytest.fixture
def wildcard_caddyfile():
    return (
        "# ==== Services ====\n"
        "*.home.example.com {\n"
        "    tls {\n"
        "        dns cloudflare {env.CF_API_TOKEN}\n"
        "    }\n"
        "\n"
        "    # Photo library\n"
        "    @photos host photos.home.example.com\n"
        "    handle @photos {\n"
        "        reverse_proxy localhost:2342\n"
        "    }\n"
        "\n"
        "    # Media server\n"
        "    @media host media.home.example.com\n"
        "    handle @media {\n"
        "        encode gzip\n"
        "        reverse_proxy localhost:8096\n"
        "    }\n"
        "\n"
        "    handle {\n"
        "        abort\n"
        "    }\n"
        "}\n"
    )


@pytest.fixture
def html_document():
    return "<!DOCTYPE html>\n<html>\n<body>Hello</body>\n</html>\n"


@pytest.fixture
def caddy_json_config():
    return json.dumps({
        "apps": {
            "http": {
                "servers": {
                    "srv0": {
                        "listen": [":443"],
                        "routes": [],
                    },
                },
            },
        },
    })


# ==========================================================================
# Redis
# ==========================================================================

class InMemoryRedis:
    """Minimal in-memory Redis stub (no server required)."""

    def __init__(self):
        self._store: dict = {}
        self.ttls: dict = {}

    def set(self, key: str, value: str, ex: int | None = None, **kwargs) -> None:  # noqa: ARG002
        self._store[key] = value
        self.ttls[key] = ex

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self._store)

    def delete(self, *keys: str) -> int:
        deleted = 0
        for k in keys:
            if k in self._store:
                del self._store[k]
                deleted += 1
        return deleted

    def keys_matching(self, prefix: str) -> list[str]:
        return [k for k in self._store if k.startswith(prefix)]


class FailingRedis:
    """Redis stub whose writes always fail."""

    def set(self, key: str, value: str, **kwargs) -> None:  # noqa: ARG002
        raise ConnectionError("redis down")

    def get(self, key: str) -> None:  # noqa: ARG002
        return None


@pytest.fixture
def redis_stub():
    return InMemoryRedis()


@pytest.fixture
def failing_redis():
    return FailingRedis()


# ==========================================================================
# HTTP
# ==========================================================================

class FakeResponse:
    """Just enough of requests.Response for the admin client."""

    def __init__(self, status_code: int = 200, body=None, text: str | None = None, reason: str = ""):
        self.status_code = status_code
        self._body = body
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text
        self.reason = reason

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            return json.loads(self.text) if self.text else None
        return self._body


class FakeSession:
    """
    Records requests and replays canned responses keyed by (METHOD, path).

    A value may be a FakeResponse or an exception instance to raise.
    """

    def __init__(self, base_url: str = "http://caddy.test:2019"):
        self.base_url = base_url
        self.routes: dict = {}
        self.calls: list = []

    def add(self, method: str, path: str, response) -> None:
        self.routes[(method.upper(), path)] = response

    def request(self, method, url, data=None, json=None, headers=None, timeout=None):  # noqa: A002
        path = url[len(self.base_url):]
        self.calls.append({
            "method": method,
            "path": path,
            "data": data,
            "json": json,
            "headers": headers or {},
            "timeout": timeout,
        })
        response = self.routes.get((method.upper(), path))
        if response is None:
            return FakeResponse(404, text="not found", reason="Not Found")
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def admin_client(fake_session):
    from clubs.caddy.admin_client import CaddyAdminClient

    return CaddyAdminClient(base_url=fake_session.base_url, timeout=1.5, session=fake_session)


@pytest.fixture
def make_response():
    return FakeResponse
