# core/auth/types/types.py
"""
core/auth/types/types.py - 인증 모듈의 핵심 타입 정의

이 모듈은 인증 시스템 전체에서 사용되는 기본 타입들을 정의합니다.

포함 항목:
    - EnvironmentKind: 환경 종류 열거형 (BUILTIN, ADMIN, USER)
    - Environment: Azure 엔드포인트 집합 데이터 클래스
    - Session: 로그인 결과 (계정/테넌트/구독/환경/토큰 캐시)
    - LoginOptions: 대화형 로그인 옵션 (모든 필드 선택적)
    - AccountProfile: 호출자가 지정하는 계정 프로파일
    - AuthBackend: 모든 인증 백엔드가 구현해야 하는 추상 기본 클래스 (ABC)
    - 에러 클래스: AuthError, NotAuthenticatedError, TokenExpiredError,
      EnvironmentNotFoundError, ConfigurationError, ProviderError
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from core.config import settings
from core.exceptions import AzctxError, ValidationError

logger = logging.getLogger(__name__)

# 파일명에 사용할 수 없는 문자 (Windows 예약 문자 포함)
_RESERVED_CHARS = set('<>:"/\\|?*\0')


# =============================================================================
# Environment
# =============================================================================


class EnvironmentKind(Enum):
    """환경 종류를 나타내는 열거형

    - BUILTIN: 공용/국가별 클라우드 (AzureCloud 등)
    - ADMIN: Azure Stack 관리자 엔드포인트 (adminmanagement.*)
    - USER: Azure Stack 사용자 엔드포인트 (management.*)
    """

    BUILTIN = "builtin"
    ADMIN = "admin"
    USER = "user"

    def __str__(self) -> str:
        return self.value


class AutosaveMode(Enum):
    """컨텍스트 자동 저장 범위

    - CURRENT_USER: 모든 세션 변경을 사용자 공용 컨텍스트 파일에 기록
    - PROCESS: 현재 프로세스 메모리에만 유지
    """

    CURRENT_USER = "CurrentUser"
    PROCESS = "Process"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Environment:
    """Azure 환경 (엔드포인트 집합)

    Attributes:
        name: 환경 이름 (예: AzureCloud, AzureStackAdmin)
        resource_manager_url: ARM 엔드포인트
        active_directory_authority: 로그인 authority (테넌트 제외)
        management_audience: ARM 토큰 audience
        key_vault_dns_suffix: Key Vault DNS 접미사
        graph_url: Microsoft Graph 엔드포인트 (없으면 보조 로그인 불가)
        kind: 환경 종류
    """

    name: str
    resource_manager_url: str
    active_directory_authority: str
    management_audience: str
    key_vault_dns_suffix: str
    graph_url: str | None = None
    kind: EnvironmentKind = EnvironmentKind.BUILTIN

    def authority_for(self, tenant_id: str | None) -> str:
        """테넌트별 로그인 authority URL"""
        base = self.active_directory_authority.rstrip("/")
        return f"{base}/{tenant_id or 'organizations'}"

    @property
    def management_scope(self) -> str:
        """ARM 토큰 요청 scope"""
        return f"{self.management_audience.rstrip('/')}/.default"

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (EnvironmentTable 저장용)"""
        return {
            "Name": self.name,
            "Kind": self.kind.value,
            "ResourceManagerUrl": self.resource_manager_url,
            "ActiveDirectoryAuthority": self.active_directory_authority,
            "ManagementAudience": self.management_audience,
            "KeyVaultDnsSuffix": self.key_vault_dns_suffix,
            "GraphUrl": self.graph_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Environment:
        """딕셔너리에서 생성"""
        return cls(
            name=data["Name"],
            resource_manager_url=data.get("ResourceManagerUrl", ""),
            active_directory_authority=data.get("ActiveDirectoryAuthority", ""),
            management_audience=data.get("ManagementAudience", ""),
            key_vault_dns_suffix=data.get("KeyVaultDnsSuffix", ""),
            graph_url=data.get("GraphUrl"),
            kind=EnvironmentKind(data.get("Kind", EnvironmentKind.BUILTIN.value)),
        )


# =============================================================================
# Session / Options / Profile
# =============================================================================


@dataclass(frozen=True)
class Session:
    """인증된 세션

    매니저는 내부 구조를 해석하지 않고 백엔드에 그대로 전달합니다.
    구독 전환 등은 새 Session을 반환합니다 (불변).

    Attributes:
        account_id: 로그인 계정 (UPN)
        tenant_id: 테넌트 ID
        environment_name: 환경 이름
        subscription_id: 활성 구독 ID
        subscription_name: 활성 구독 이름
        home_account_id: MSAL 계정 식별자 (토큰 캐시 조회용)
        token_cache: 직렬화된 MSAL 토큰 캐시
    """

    account_id: str
    tenant_id: str
    environment_name: str = settings.DEFAULT_ENVIRONMENT
    subscription_id: str | None = None
    subscription_name: str | None = None
    home_account_id: str | None = None
    token_cache: str = field(default="", repr=False)

    def with_subscription(self, subscription_id: str, subscription_name: str | None = None) -> Session:
        """구독만 바꾼 새 Session 반환"""
        return replace(self, subscription_id=subscription_id, subscription_name=subscription_name)

    def with_token_cache(self, token_cache: str) -> Session:
        """토큰 캐시만 바꾼 새 Session 반환"""
        return replace(self, token_cache=token_cache)


@dataclass(frozen=True)
class LoginOptions:
    """대화형 로그인 옵션

    각 필드는 독립적으로 지정하거나 생략할 수 있습니다.
    """

    tenant_id: str | None = None
    subscription_id: str | None = None
    environment_name: str | None = None


def validate_account_name(account_name: str) -> str:
    """계정 이름이 파일명으로 안전한지 검사

    Args:
        account_name: 계정 이름 (캐시 파일명으로 그대로 사용)

    Returns:
        검사를 통과한 계정 이름

    Raises:
        ValidationError: 비어 있거나, '.'/'..'이거나, 경로 구분자/예약 문자를 포함한 경우
    """
    expected = "경로 구분자와 예약 문자가 없는 파일명"
    if not account_name or not account_name.strip():
        raise ValidationError("account_name", account_name, expected)
    if account_name in (".", ".."):
        raise ValidationError("account_name", account_name, expected)
    if any(ch in _RESERVED_CHARS for ch in account_name):
        raise ValidationError("account_name", account_name, expected)
    if account_name != account_name.strip() or account_name.endswith("."):
        raise ValidationError("account_name", account_name, expected)
    return account_name


@dataclass
class AccountProfile:
    """호출자가 지정하는 계정 프로파일

    Attributes:
        parent_folder: 캐시 파일 폴더 (없으면 생성)
        account_name: 계정 이름 (캐시 파일명)
        tenant_id: 테넌트 ID
        subscription_id: 원하는 구독 ID (선택)
        environment_name: 환경 이름 (선택)
    """

    parent_folder: Path
    account_name: str
    tenant_id: str | None = None
    subscription_id: str | None = None
    environment_name: str | None = None

    def __post_init__(self):
        self.parent_folder = Path(self.parent_folder).expanduser()
        validate_account_name(self.account_name)

    def login_options(self) -> LoginOptions:
        """대화형 로그인 옵션으로 변환"""
        return LoginOptions(
            tenant_id=self.tenant_id,
            subscription_id=self.subscription_id,
            environment_name=self.environment_name,
        )


# =============================================================================
# AuthBackend Interface (Abstract Base Class)
# =============================================================================


class AuthBackend(ABC):
    """모든 인증 백엔드가 구현해야 하는 추상 기본 클래스

    백엔드는 전역(ambient) 세션을 갖지 않습니다.
    모든 호출은 명시적인 Session 값을 받습니다.
    """

    # 매니저가 캐시 폴더에서 정리할 백엔드 부산물 파일 패턴
    stray_artifact_patterns: tuple[str, ...] = ()

    @abstractmethod
    def name(self) -> str:
        """백엔드 이름(식별자)을 반환합니다."""
        pass

    @abstractmethod
    def load_session(self, path: Path) -> Session | None:
        """컨텍스트 파일에서 Session을 로드합니다.

        Returns:
            Session 또는 None (컨텍스트가 없는 경우)

        Raises:
            ConfigurationError: 파일을 해석할 수 없는 경우
        """
        pass

    @abstractmethod
    def save_session(self, session: Session, path: Path) -> None:
        """Session을 컨텍스트 파일에 저장합니다 (덮어쓰기)."""
        pass

    @abstractmethod
    def interactive_login(self, options: LoginOptions) -> Session | None:
        """대화형 로그인을 수행합니다.

        Returns:
            Session 또는 None (로그인 실패/취소)
        """
        pass

    @abstractmethod
    def validate_by_query(
        self, session: Session, tenant_id: str | None, subscription_id: str | None
    ) -> Session | None:
        """부작용 없는 가벼운 조회로 세션 유효성을 확인합니다.

        토큰 획득 중 갱신된 토큰 캐시는 반환되는 Session에 담깁니다.

        Returns:
            조회 결과가 비어 있지 않으면 Session (갱신된 토큰 캐시 포함), 아니면 None
        """
        pass

    @abstractmethod
    def select_subscription(self, session: Session, subscription_id: str, tenant_id: str | None) -> Session:
        """지정한 구독으로 전환된 새 Session을 반환합니다.

        Raises:
            ProviderError: 구독에 접근할 수 없는 경우
        """
        pass

    @abstractmethod
    def get_cached_token(self, session: Session, audience: str) -> str | None:
        """세션의 토큰 캐시에서 대화형 입력 없이 액세스 토큰을 얻습니다."""
        pass

    @abstractmethod
    def register_environment(self, environment: Environment) -> None:
        """환경을 등록합니다 (프로세스 밖에서도 유지)."""
        pass

    @abstractmethod
    def list_known_environments(self) -> set[str]:
        """알려진 환경 이름 집합을 반환합니다."""
        pass

    @property
    def autosave_mode(self) -> AutosaveMode:
        """현재 자동 저장 범위 (기본: PROCESS)"""
        return AutosaveMode.PROCESS

    def set_autosave_mode(self, mode: AutosaveMode) -> None:  # noqa: B027
        """자동 저장 범위를 변경합니다.

        기본 구현은 아무것도 하지 않습니다.
        """
        pass

    def close(self) -> None:  # noqa: B027
        """리소스를 정리합니다.

        기본 구현은 아무것도 하지 않습니다.
        """
        pass


# =============================================================================
# Error Classes
# =============================================================================


class AuthError(AzctxError):
    """인증 관련 기본 에러 클래스

    모든 인증 에러의 부모 클래스입니다.
    원인 예외(cause)를 체이닝하여 디버깅을 용이하게 합니다.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message, cause)


class NotAuthenticatedError(AuthError):
    """인증되지 않은 세션으로 작업을 시도할 때 발생하는 에러"""

    def __init__(self, message: str = "인증이 필요합니다", cause: Exception | None = None):
        super().__init__(message, cause)


class TokenExpiredError(AuthError):
    """토큰이 만료되었을 때 발생하는 에러

    Attributes:
        expired_at: 토큰 만료 시간 (옵션)
    """

    def __init__(
        self,
        message: str = "토큰이 만료되었습니다",
        expired_at: datetime | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.expired_at = expired_at


class EnvironmentNotFoundError(AuthError):
    """알 수 없는 환경 이름

    Attributes:
        environment_name: 찾을 수 없는 환경 이름
    """

    def __init__(self, environment_name: str, cause: Exception | None = None):
        super().__init__(f"환경을 찾을 수 없습니다: {environment_name}", cause)
        self.environment_name = environment_name


class ConfigurationError(AuthError):
    """설정/컨텍스트 파일 오류

    Attributes:
        config_key: 문제가 된 설정 키 또는 파일 경로 (옵션)
    """

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.config_key = config_key


class ProviderError(AuthError):
    """백엔드에서 발생하는 에러

    에러 메시지 형식: "[provider] operation: message"

    Attributes:
        provider: 에러가 발생한 백엔드 이름
        operation: 실패한 작업 이름 (예: "interactive_login", "select_subscription")
    """

    def __init__(
        self,
        provider: str,
        operation: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"[{provider}] {operation}: {message}"
        super().__init__(full_message, cause)
        self.provider = provider
        self.operation = operation
