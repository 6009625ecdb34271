# core/auth/provider/directory.py
"""
보조 디렉토리 서비스 로그인

기본 로그인이 끝난 뒤 같은 계정/테넌트로 Microsoft Graph에 로그인하고
테넌트 기본 도메인을 조회합니다.

디렉토리 기능은 시작 시 한 번만 결정되어 매니저에 주입됩니다
(resolve_directory_service). 비활성화되었거나 지원하지 않는 플랫폼이면 None입니다.
"""

from __future__ import annotations

import logging
import os
import platform
from abc import ABC, abstractmethod

import requests

from core.config import get_api_timeout, is_directory_enabled, settings
from core.exceptions import APICallError

from ..types import NotAuthenticatedError, ProviderError, Session
from .msal_backend import MsalBackend

logger = logging.getLogger(__name__)

UNSUPPORTED_PLATFORMS_ENV_VAR = "AZCTX_DIRECTORY_UNSUPPORTED_PLATFORMS"


class DirectoryService(ABC):
    """보조 디렉토리 서비스 인터페이스"""

    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def login(self, session: Session) -> tuple[str, Session]:
        """세션의 계정/테넌트로 로그인하고 디렉토리 도메인 이름을 반환합니다.

        로그인 중 토큰 캐시가 바뀌면 바뀐 캐시를 담은 Session을 함께 반환합니다.

        Raises:
            AuthError: 로그인 또는 조회 실패
        """
        pass


class GraphDirectoryService(DirectoryService):
    """Microsoft Graph 디렉토리 로그인

    캐시된 토큰이 없으면 계정 힌트를 넣어 대화형 로그인을 한 번 더 수행합니다.
    """

    def __init__(self, backend: MsalBackend, http: requests.Session | None = None):
        self._backend = backend
        self._http = http or requests.Session()

    def name(self) -> str:
        return "graph"

    def login(self, session: Session) -> tuple[str, Session]:
        environment = self._backend.get_environment(session.environment_name)
        if not environment.graph_url:
            raise ProviderError(self.name(), "login", f"Graph 엔드포인트가 없는 환경입니다: {environment.name}")

        graph_url = environment.graph_url.rstrip("/")
        try:
            token, session = self._backend.acquire_token(
                session, [f"{graph_url}/.default"], tenant_id=session.tenant_id, interactive=True
            )
        except (ValueError, requests.RequestException) as e:
            raise ProviderError(self.name(), "login", session.account_id, cause=e) from e
        if not token:
            raise NotAuthenticatedError(f"Graph 토큰을 얻지 못했습니다: {session.account_id}")

        try:
            response = self._http.get(
                f"{graph_url}/v1.0/organization",
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
                timeout=get_api_timeout(),
            )
        except requests.RequestException as e:
            raise ProviderError(self.name(), "organization", session.tenant_id, cause=e) from e
        if not response.ok:
            error = APICallError.from_response("graph", "organization", response)
            raise ProviderError(self.name(), "organization", session.tenant_id, cause=error)

        return self._default_domain(response.json(), session.tenant_id), session

    @staticmethod
    def _default_domain(body: dict, tenant_id: str) -> str:
        """organization 응답에서 기본 도메인 추출 (없으면 첫 도메인, 그것도 없으면 테넌트 ID)"""
        organizations = body.get("value") or []
        if not organizations:
            return tenant_id

        domains = organizations[0].get("verifiedDomains") or []
        for domain in domains:
            if domain.get("isDefault"):
                return domain["name"]
        return domains[0]["name"] if domains else tenant_id


def get_unsupported_platforms() -> tuple[str, ...]:
    """디렉토리 로그인을 지원하지 않는 플랫폼 목록

    AZCTX_DIRECTORY_UNSUPPORTED_PLATFORMS(쉼표 구분)가 있으면 그 값을 사용합니다.
    빈 문자열이면 모든 플랫폼을 허용합니다.
    """
    value = os.environ.get(UNSUPPORTED_PLATFORMS_ENV_VAR)
    if value is None:
        return settings.DIRECTORY_UNSUPPORTED_PLATFORMS
    return tuple(p.strip() for p in value.split(",") if p.strip())


def resolve_directory_service(
    backend: MsalBackend,
    enabled: bool | None = None,
    platform_name: str | None = None,
) -> DirectoryService | None:
    """디렉토리 기능 결정 (시작 시 한 번)

    Args:
        backend: MSAL 백엔드
        enabled: 사용 여부 (기본: AZCTX_DIRECTORY)
        platform_name: 플랫폼 이름 (기본: platform.system())

    Returns:
        GraphDirectoryService 또는 None
    """
    if enabled is None:
        enabled = is_directory_enabled()
    if not enabled:
        return None

    platform_name = platform_name or platform.system()
    if platform_name in get_unsupported_platforms():
        logger.debug("디렉토리 로그인 미지원 플랫폼: %s", platform_name)
        return None

    return GraphDirectoryService(backend)
