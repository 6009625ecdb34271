# tests/core/auth/test_auth_directory.py
"""
core/auth/provider/directory.py 단위 테스트
"""

from unittest.mock import MagicMock

import pytest
import requests

from core.auth.environment import build_stack_environment
from core.auth.provider.directory import (
    GraphDirectoryService,
    get_unsupported_platforms,
    resolve_directory_service,
)
from core.auth.types import NotAuthenticatedError, ProviderError, Session

SESSION = Session(account_id="user@contoso.com", tenant_id="tenant-1")


def _response(status=200, body=None):
    response = MagicMock()
    response.ok = 200 <= status < 300
    response.status_code = status
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def backend():
    """MsalBackend 모킹 (AzureCloud 환경)"""
    from core.auth.environment import BUILTIN_ENVIRONMENTS

    backend = MagicMock()
    backend.get_environment.return_value = BUILTIN_ENVIRONMENTS["AzureCloud"]
    backend.acquire_token.side_effect = lambda session, *args, **kwargs: ("graph-token", session)
    return backend


class TestGraphDirectoryService:
    """GraphDirectoryService 테스트"""

    def test_default_domain(self, backend):
        http = MagicMock()
        http.get.return_value = _response(
            body={
                "value": [
                    {
                        "verifiedDomains": [
                            {"name": "contoso.onmicrosoft.com", "isDefault": False},
                            {"name": "contoso.com", "isDefault": True},
                        ]
                    }
                ]
            }
        )
        service = GraphDirectoryService(backend, http=http)

        assert service.login(SESSION) == ("contoso.com", SESSION)
        backend.acquire_token.assert_called_once_with(
            SESSION, ["https://graph.microsoft.com/.default"], tenant_id="tenant-1", interactive=True
        )
        assert http.get.call_args[0][0] == "https://graph.microsoft.com/v1.0/organization"

    def test_first_domain_when_no_default(self, backend):
        http = MagicMock()
        http.get.return_value = _response(body={"value": [{"verifiedDomains": [{"name": "fabrikam.com"}]}]})

        assert GraphDirectoryService(backend, http=http).login(SESSION)[0] == "fabrikam.com"

    def test_tenant_when_no_organization(self, backend):
        http = MagicMock()
        http.get.return_value = _response(body={"value": []})

        assert GraphDirectoryService(backend, http=http).login(SESSION)[0] == "tenant-1"

    def test_no_graph_endpoint(self, backend):
        backend.get_environment.return_value = build_stack_environment("AzureStackUser")

        with pytest.raises(ProviderError):
            GraphDirectoryService(backend, http=MagicMock()).login(SESSION)

    def test_no_token(self, backend):
        backend.acquire_token.side_effect = lambda session, *args, **kwargs: (None, session)

        with pytest.raises(NotAuthenticatedError):
            GraphDirectoryService(backend, http=MagicMock()).login(SESSION)

    def test_graph_error(self, backend):
        http = MagicMock()
        http.get.return_value = _response(403, {"error": {"code": "Authorization_RequestDenied"}})

        with pytest.raises(ProviderError):
            GraphDirectoryService(backend, http=http).login(SESSION)

    def test_network_error(self, backend):
        http = MagicMock()
        http.get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(ProviderError):
            GraphDirectoryService(backend, http=http).login(SESSION)

    def test_refreshed_session_returned(self, backend):
        """Graph 토큰 획득으로 바뀐 토큰 캐시를 담은 Session 반환"""
        refreshed = SESSION.with_token_cache('{"AccessToken": {"graph": {}}}')
        backend.acquire_token.side_effect = None
        backend.acquire_token.return_value = ("graph-token", refreshed)
        http = MagicMock()
        http.get.return_value = _response(body={"value": []})

        domain, session = GraphDirectoryService(backend, http=http).login(SESSION)

        assert domain == "tenant-1"
        assert session is refreshed

    def test_name(self, backend):
        assert GraphDirectoryService(backend, http=MagicMock()).name() == "graph"


class TestResolveDirectoryService:
    """resolve_directory_service 테스트"""

    def test_disabled(self, backend):
        assert resolve_directory_service(backend, enabled=False, platform_name="Windows") is None

    def test_disabled_by_env(self, backend, monkeypatch):
        monkeypatch.setenv("AZCTX_DIRECTORY", "false")
        assert resolve_directory_service(backend, platform_name="Windows") is None

    def test_unsupported_platform(self, backend):
        assert resolve_directory_service(backend, enabled=True, platform_name="Darwin") is None
        assert resolve_directory_service(backend, enabled=True, platform_name="Linux") is None

    def test_supported_platform(self, backend):
        service = resolve_directory_service(backend, enabled=True, platform_name="Windows")
        assert isinstance(service, GraphDirectoryService)

    def test_platforms_from_env(self, backend, monkeypatch):
        """빈 목록이면 모든 플랫폼 허용"""
        monkeypatch.setenv("AZCTX_DIRECTORY_UNSUPPORTED_PLATFORMS", "")
        assert get_unsupported_platforms() == ()
        assert resolve_directory_service(backend, enabled=True, platform_name="Linux") is not None

    def test_platforms_default(self):
        assert get_unsupported_platforms() == ("Darwin", "Linux")

    def test_platforms_custom(self, monkeypatch):
        monkeypatch.setenv("AZCTX_DIRECTORY_UNSUPPORTED_PLATFORMS", "Windows, Darwin")
        assert get_unsupported_platforms() == ("Windows", "Darwin")
