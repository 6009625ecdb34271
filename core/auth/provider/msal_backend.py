# core/auth/provider/msal_backend.py
"""
MSAL 기반 인증 백엔드

Microsoft Authentication Library(msal)의 공개 클라이언트로 대화형 로그인을 수행하고,
ARM REST(requests)로 구독 조회/검증을 수행합니다.

Session 직렬화:
    컨텍스트 파일의 Contexts["Default"]에 계정/테넌트/구독/환경과
    직렬화된 MSAL 토큰 캐시(TokenCache.CacheData)를 저장합니다.

Usage:
    backend = MsalBackend()
    session = backend.interactive_login(LoginOptions(tenant_id="..."))
    backend.save_session(session, Path("~/.azctx/contexts/work.json").expanduser())
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import msal
import requests

from core.config import get_api_timeout, get_config_dir, settings
from core.exceptions import APICallError, is_auth_failure

from ..cache import CacheRecord, read_record, write_record
from ..config import BackendConfig, load_config
from ..environment import BUILTIN_ENVIRONMENTS, EnvironmentRegistry, build_stack_environment
from ..types import (
    AuthBackend,
    AutosaveMode,
    ConfigurationError,
    Environment,
    EnvironmentKind,
    LoginOptions,
    NotAuthenticatedError,
    ProviderError,
    Session,
    TokenExpiredError,
)

logger = logging.getLogger(__name__)


@dataclass
class MsalBackendConfig:
    """MsalBackend 설정

    Attributes:
        client_id: 공개 클라이언트 ID (기본: Azure CLI)
        config_dir: 설정 디렉토리 (환경 레지스트리, 자동 저장 파일)
        timeout: ARM/Graph HTTP 타임아웃 (초)
    """

    client_id: str = settings.CLIENT_ID
    config_dir: Path = field(default_factory=get_config_dir)
    timeout: int = field(default_factory=get_api_timeout)


class MsalBackend(AuthBackend):
    """MSAL + ARM REST 인증 백엔드

    전역 세션 상태를 갖지 않으며, 모든 토큰 조회는 인자로 받은
    Session의 토큰 캐시에서 수행합니다.
    """

    # 중단된 저장이 남긴 임시 파일, msal-extensions 잠금 파일
    stray_artifact_patterns = (".*.tmp", "*.lockfile")

    def __init__(
        self,
        config: MsalBackendConfig | None = None,
        http: requests.Session | None = None,
        app_factory: Callable[..., Any] | None = None,
        backend_config: BackendConfig | None = None,
    ):
        """MsalBackend 초기화

        Args:
            config: 백엔드 설정
            http: ARM 호출용 requests.Session (테스트 주입용)
            app_factory: msal.PublicClientApplication 대체 (테스트 주입용)
            backend_config: 주변 설정 (기본: settings.json 로드)
        """
        self._config = config or MsalBackendConfig()
        self._http = http or requests.Session()
        self._app_factory = app_factory or msal.PublicClientApplication
        self._backend_config = backend_config or load_config(self._config.config_dir)
        self._autosave = self._backend_config.autosave
        self._registry = EnvironmentRegistry(self._config.config_dir)

    def name(self) -> str:
        return "msal"

    # =========================================================================
    # 환경
    # =========================================================================

    def get_environment(self, name: str | None) -> Environment:
        """환경 조회 (None이면 기본 환경)

        Raises:
            EnvironmentNotFoundError: 알 수 없는 이름
        """
        return self._registry.get(name or settings.DEFAULT_ENVIRONMENT)

    def register_environment(self, environment: Environment) -> None:
        """환경 등록

        Azure Stack 환경은 ARM 메타데이터 엔드포인트에서 로그인 엔드포인트와
        audience를 보정합니다. 조회에 실패하면 기본값으로 등록합니다.
        """
        if environment.kind != EnvironmentKind.BUILTIN:
            try:
                metadata = self.fetch_metadata(environment.resource_manager_url)
            except APICallError as e:
                logger.warning("ARM 메타데이터 조회 실패, 기본 엔드포인트로 등록: %s", e)
            else:
                discovered = build_stack_environment(environment.name, metadata=metadata)
                environment = Environment(
                    name=environment.name,
                    resource_manager_url=environment.resource_manager_url,
                    active_directory_authority=discovered.active_directory_authority,
                    management_audience=discovered.management_audience,
                    key_vault_dns_suffix=environment.key_vault_dns_suffix,
                    graph_url=discovered.graph_url,
                    kind=environment.kind,
                )

        self._registry.register(environment)

    def list_known_environments(self) -> set[str]:
        return self._registry.names()

    def fetch_metadata(self, resource_manager_url: str) -> dict[str, Any]:
        """ARM 메타데이터 엔드포인트 조회

        GET {arm}/metadata/endpoints?api-version=2015-01-01
        """
        url = f"{resource_manager_url.rstrip('/')}/metadata/endpoints"
        return self._request(
            url,
            token=None,
            params={"api-version": settings.ARM_METADATA_API_VERSION},
            service="arm",
            operation="metadata_endpoints",
        )

    # =========================================================================
    # 자동 저장
    # =========================================================================

    @property
    def autosave_mode(self) -> AutosaveMode:
        return self._autosave

    def set_autosave_mode(self, mode: AutosaveMode) -> None:
        """자동 저장 범위 변경 (현재 프로세스에만 적용, 설정 파일은 그대로)"""
        if mode != self._autosave:
            logger.debug("자동 저장 범위 변경: %s -> %s", self._autosave, mode)
        self._autosave = mode

    def _autosave_session(self, session: Session) -> None:
        if self._autosave == AutosaveMode.CURRENT_USER:
            self.save_session(session, self._backend_config.default_context_path)

    # =========================================================================
    # Session 직렬화
    # =========================================================================

    def load_session(self, path: Path) -> Session | None:
        """컨텍스트 파일에서 Session 로드

        파일에 기록된 사용자 환경이 레지스트리에 없으면 함께 등록합니다.

        Raises:
            ConfigurationError: 파일 또는 컨텍스트 형식 오류
        """
        record = read_record(path)
        if record is None or record.is_empty():
            return None

        context = record.default_context
        if context is None:
            raise ConfigurationError("기본 컨텍스트가 없습니다", config_key=str(path))
        if not isinstance(context, dict):
            raise ConfigurationError("기본 컨텍스트가 객체가 아닙니다", config_key=str(path))

        try:
            for env_name, env_data in record.environment_table.items():
                if not self._registry.contains(env_name):
                    self._registry.register(Environment.from_dict(env_data))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(
                "EnvironmentTable 형식이 올바르지 않습니다", config_key=str(path), cause=e
            ) from e

        try:
            subscription = context.get("Subscription") or {}
            return Session(
                account_id=context["Account"]["Id"],
                home_account_id=context["Account"].get("HomeAccountId"),
                tenant_id=context["Tenant"]["Id"],
                subscription_id=subscription.get("Id"),
                subscription_name=subscription.get("Name"),
                environment_name=(context.get("Environment") or {}).get("Name", settings.DEFAULT_ENVIRONMENT),
                token_cache=(context.get("TokenCache") or {}).get("CacheData", ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError("컨텍스트 형식이 올바르지 않습니다", config_key=str(path), cause=e) from e

    def save_session(self, session: Session, path: Path) -> None:
        """Session을 컨텍스트 파일에 저장 (덮어쓰기)"""
        context: dict[str, Any] = {
            "Account": {"Id": session.account_id, "HomeAccountId": session.home_account_id},
            "Tenant": {"Id": session.tenant_id},
            "Subscription": (
                {"Id": session.subscription_id, "Name": session.subscription_name}
                if session.subscription_id
                else None
            ),
            "Environment": {"Name": session.environment_name},
            "TokenCache": {"CacheData": session.token_cache},
        }

        record = CacheRecord.empty()
        record.contexts[record.default_context_key] = context

        environment = self._registry.find(session.environment_name)
        if environment is not None and environment.name not in BUILTIN_ENVIRONMENTS:
            record.environment_table[environment.name] = environment.to_dict()

        write_record(path, record)
        logger.debug("컨텍스트 저장: %s", path)

    # =========================================================================
    # 로그인 / 토큰
    # =========================================================================

    def _build_app(self, environment: Environment, tenant_id: str | None, cache: msal.SerializableTokenCache):
        kwargs: dict[str, Any] = {
            "authority": environment.authority_for(tenant_id),
            "token_cache": cache,
        }
        # Azure Stack 등 사설 authority는 인스턴스 검색을 끔
        if environment.kind != EnvironmentKind.BUILTIN:
            kwargs["instance_discovery"] = False
        return self._app_factory(self._config.client_id, **kwargs)

    @staticmethod
    def _load_token_cache(session: Session) -> msal.SerializableTokenCache:
        cache = msal.SerializableTokenCache()
        if session.token_cache:
            cache.deserialize(session.token_cache)
        return cache

    def acquire_token(
        self,
        session: Session,
        scopes: list[str],
        tenant_id: str | None = None,
        interactive: bool = False,
    ) -> tuple[str | None, Session]:
        """세션의 토큰 캐시로 액세스 토큰 획득

        msal이 토큰을 갱신하면서 캐시가 바뀌면 바뀐 캐시를 담은 Session을 함께 반환합니다.
        호출자는 이 Session을 저장해야 다음 실행에서 갱신된 refresh token을 씁니다.

        Args:
            session: 대상 세션
            scopes: 요청 scope 목록
            tenant_id: authority 테넌트 (기본: 세션 테넌트)
            interactive: 캐시에 없을 때 대화형 로그인 허용 여부

        Returns:
            (액세스 토큰 또는 None, 토큰 캐시가 반영된 Session)
        """
        environment = self.get_environment(session.environment_name)
        cache = self._load_token_cache(session)
        app = self._build_app(environment, tenant_id or session.tenant_id, cache)

        accounts = app.get_accounts(username=session.account_id) if session.account_id else []
        if session.home_account_id:
            accounts = [a for a in accounts if a.get("home_account_id") == session.home_account_id] or accounts

        result = None
        if accounts:
            result = app.acquire_token_silent(scopes, account=accounts[0])

        if (not result or "access_token" not in result) and interactive:
            result = app.acquire_token_interactive(scopes, login_hint=session.account_id)

        if cache.has_state_changed:
            logger.debug("토큰 캐시 갱신됨: %s", session.account_id)
            session = session.with_token_cache(cache.serialize())

        if not result or "access_token" not in result:
            if result:
                logger.debug("토큰 획득 실패: %s", result.get("error_description") or result.get("error"))
            return None, session
        return result["access_token"], session

    def get_cached_token(self, session: Session, audience: str) -> str | None:
        """대화형 입력 없이 audience 토큰 획득"""
        try:
            token, _ = self.acquire_token(session, [f"{audience.rstrip('/')}/.default"])
        except (ValueError, requests.RequestException) as e:
            logger.debug("캐시 토큰 조회 실패: %s", e)
            return None
        return token

    def interactive_login(self, options: LoginOptions) -> Session | None:
        """브라우저 기반 대화형 로그인

        Returns:
            Session 또는 None (취소, 인증 실패, 요청한 구독 접근 불가)
        """
        environment = self.get_environment(options.environment_name)
        cache = msal.SerializableTokenCache()

        try:
            app = self._build_app(environment, options.tenant_id, cache)
            result = app.acquire_token_interactive([environment.management_scope], prompt="select_account")
        except (ValueError, requests.RequestException) as e:
            logger.error("대화형 로그인 오류: %s", e)
            return None

        if not result or "access_token" not in result:
            reason = (result or {}).get("error_description") or (result or {}).get("error") or "unknown"
            logger.error("대화형 로그인 실패: %s", reason)
            return None

        claims = result.get("id_token_claims") or {}
        accounts = app.get_accounts()
        account = accounts[0] if accounts else {}

        session = Session(
            account_id=claims.get("preferred_username") or claims.get("upn") or account.get("username", ""),
            home_account_id=account.get("home_account_id"),
            tenant_id=claims.get("tid") or options.tenant_id or "",
            environment_name=environment.name,
            token_cache=cache.serialize(),
        )

        try:
            subscription = self._resolve_subscription(
                environment, result["access_token"], options.subscription_id, session.tenant_id
            )
        except APICallError as e:
            logger.error("구독 조회 실패: %s", e)
            return None

        if subscription is None and options.subscription_id:
            logger.error("구독에 접근할 수 없습니다: %s", options.subscription_id)
            return None
        if subscription is not None:
            session = session.with_subscription(subscription["subscriptionId"], subscription.get("displayName"))

        self._autosave_session(session)
        return session

    # =========================================================================
    # 구독 / 검증
    # =========================================================================

    def validate_by_query(
        self, session: Session, tenant_id: str | None, subscription_id: str | None
    ) -> Session | None:
        """ARM 구독 조회로 세션 유효성 확인

        구독이 지정되면 해당 구독을, 아니면 구독 목록을 조회하여
        결과가 비어 있지 않으면 유효합니다.

        Returns:
            유효하면 토큰 캐시 갱신이 반영된 Session, 아니면 None
        """
        if tenant_id and session.tenant_id and tenant_id.lower() != session.tenant_id.lower():
            logger.debug("세션 테넌트 불일치: %s != %s", session.tenant_id, tenant_id)
            return None

        environment = self.get_environment(session.environment_name)
        try:
            token, session = self.acquire_token(session, [environment.management_scope], tenant_id=tenant_id)
        except (ValueError, requests.RequestException) as e:
            logger.debug("검증용 토큰 획득 실패: %s", e)
            return None
        if not token:
            return None

        subscription_id = subscription_id or session.subscription_id
        try:
            if subscription_id:
                found = bool(self._get_subscription(environment, token, subscription_id).get("subscriptionId"))
            else:
                found = bool(self._list_subscriptions(environment, token))
        except APICallError as e:
            if is_auth_failure(e):
                logger.warning("ARM이 캐시 토큰을 거부함: %s", e)
            else:
                logger.debug("검증 조회 실패: %s", e)
            return None
        return session if found else None

    def select_subscription(self, session: Session, subscription_id: str, tenant_id: str | None) -> Session:
        """지정한 구독으로 전환된 Session 반환

        Raises:
            NotAuthenticatedError: 캐시된 토큰이 없는 경우
            TokenExpiredError: 토큰 캐시는 있지만 갱신할 수 없는 경우
            ProviderError: 구독 조회 실패 또는 테넌트 불일치
        """
        environment = self.get_environment(session.environment_name)
        token, session = self.acquire_token(session, [environment.management_scope], tenant_id=tenant_id)
        if not token:
            if session.token_cache:
                raise TokenExpiredError(f"캐시된 토큰을 갱신할 수 없습니다: {session.account_id}")
            raise NotAuthenticatedError(f"캐시된 토큰이 없습니다: {session.account_id}")

        try:
            subscription = self._get_subscription(environment, token, subscription_id)
        except APICallError as e:
            raise ProviderError(self.name(), "select_subscription", subscription_id, cause=e) from e

        sub_tenant = subscription.get("tenantId")
        if tenant_id and sub_tenant and sub_tenant.lower() != tenant_id.lower():
            raise ProviderError(
                self.name(), "select_subscription", f"구독 {subscription_id}은(는) 테넌트 {tenant_id}에 속하지 않습니다"
            )

        switched = session.with_subscription(subscription["subscriptionId"], subscription.get("displayName"))
        self._autosave_session(switched)
        return switched

    def _resolve_subscription(
        self,
        environment: Environment,
        token: str,
        requested: str | None,
        tenant_id: str | None,
    ) -> dict[str, Any] | None:
        if requested:
            try:
                return self._get_subscription(environment, token, requested)
            except APICallError as e:
                if e.status_code in (403, 404):
                    return None
                raise

        for subscription in self._list_subscriptions(environment, token):
            if subscription.get("state", "Enabled") != "Enabled":
                continue
            if tenant_id and subscription.get("tenantId", tenant_id).lower() != tenant_id.lower():
                continue
            return subscription
        return None

    def _get_subscription(self, environment: Environment, token: str, subscription_id: str) -> dict[str, Any]:
        url = f"{environment.resource_manager_url.rstrip('/')}/subscriptions/{subscription_id}"
        return self._request(
            url,
            token=token,
            params={"api-version": settings.ARM_API_VERSION},
            service="arm",
            operation="get_subscription",
        )

    def _list_subscriptions(self, environment: Environment, token: str) -> list[dict[str, Any]]:
        url: str | None = f"{environment.resource_manager_url.rstrip('/')}/subscriptions"
        params: dict[str, str] | None = {"api-version": settings.ARM_API_VERSION}
        subscriptions: list[dict[str, Any]] = []

        # nextLink에는 api-version이 이미 포함됨
        while url:
            body = self._request(url, token=token, params=params, service="arm", operation="list_subscriptions")
            subscriptions.extend(body.get("value") or [])
            url = body.get("nextLink")
            params = None
        return subscriptions

    def _request(
        self,
        url: str,
        token: str | None,
        params: dict[str, str] | None,
        service: str,
        operation: str,
    ) -> dict[str, Any]:
        """GET 요청 후 JSON 본문 반환

        Raises:
            APICallError: 네트워크 오류 또는 2xx 이외 응답
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._http.get(url, headers=headers, params=params, timeout=self._config.timeout)
        except requests.RequestException as e:
            raise APICallError(service=service, operation=operation, cause=e) from e

        if not response.ok:
            raise APICallError.from_response(service, operation, response)

        try:
            return response.json()
        except ValueError as e:
            raise APICallError(service=service, operation=operation, error_message="JSON 응답 아님", cause=e) from e

    def close(self) -> None:
        self._http.close()
