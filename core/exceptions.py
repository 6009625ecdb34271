"""
core/exceptions.py - 통합 예외 계층 구조

애플리케이션 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    AzctxError (베이스)
    ├── AuthError (인증 관련) - core.auth.types에서 정의
    │   ├── NotAuthenticatedError
    │   ├── TokenExpiredError
    │   ├── EnvironmentNotFoundError
    │   ├── ConfigurationError
    │   └── ProviderError
    ├── APICallError (ARM/Graph 호출)
    ├── ConfigError (설정 관련)
    └── ValidationError (입력 검증)

Usage:
    from core.exceptions import APICallError

    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise APICallError(service="arm", operation="get_subscription", cause=e)
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class AzctxError(Exception):
    """azctx 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# API 호출 관련 예외
# =============================================================================


class APICallError(AzctxError):
    """ARM/Graph REST 호출 관련 예외

    requests 예외나 ARM 에러 응답 본문을 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        elif status_code:
            message = f"{message} 실패 (HTTP {status_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "status_code": status_code,
                "error_code": error_code,
            }
        )

    @classmethod
    def from_response(cls, service: str, operation: str, response: Any) -> "APICallError":
        """HTTP 응답 객체로부터 생성

        ARM 에러 본문 형식: {"error": {"code": "...", "message": "..."}}

        Args:
            service: 서비스 이름 ("arm", "graph")
            operation: 작업 이름
            response: requests.Response

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            error_info = body.get("error") or {}
            if isinstance(error_info, dict):
                error_code = error_info.get("code")
                error_message = error_info.get("message")

        return cls(
            service=service,
            operation=operation,
            status_code=getattr(response, "status_code", None),
            error_code=error_code,
            error_message=error_message,
        )


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(AzctxError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class ValidationError(AzctxError):
    """입력 검증 오류"""

    def __init__(
        self,
        field: str,
        value: Any,
        expected: str,
        cause: Optional[Exception] = None,
    ):
        message = f"검증 오류 [{field}]: 예상값 '{expected}', 실제값 '{value}'"
        super().__init__(message, cause)
        self.field = field
        self.value = value
        self.expected = expected
        self.details.update(
            {
                "field": field,
                "value": str(value),
                "expected": expected,
            }
        )


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

_AUTH_FAILURE_CODES = {
    "AuthenticationFailed",
    "ExpiredAuthenticationToken",
    "InvalidAuthenticationToken",
    "InvalidAuthenticationTokenTenant",
}


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        HTTP 403 또는 AuthorizationFailed이면 True
    """
    if isinstance(error, APICallError):
        return error.status_code == 403 or error.error_code == "AuthorizationFailed"
    return False


def is_auth_failure(error: Exception) -> bool:
    """토큰 만료/무효 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        HTTP 401 또는 인증 실패 코드이면 True
    """
    if isinstance(error, APICallError):
        return error.status_code == 401 or error.error_code in _AUTH_FAILURE_CODES
    return False


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, APICallError):
        friendly_messages = {
            "AuthorizationFailed": "권한이 없습니다. 역할 할당(RBAC)을 확인하세요.",
            "ExpiredAuthenticationToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidAuthenticationTokenTenant": "구독이 지정한 테넌트에 속하지 않습니다.",
            "SubscriptionNotFound": "구독을 찾을 수 없습니다.",
        }
        if error.error_code in friendly_messages:
            return friendly_messages[error.error_code]

    return str(error)
