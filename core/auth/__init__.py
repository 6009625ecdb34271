# core/auth/__init__.py
"""
Azure 계정 컨텍스트 캐시 모듈 (core/auth)

문제점 해결:
- 셸 세션마다 대화형 로그인 반복 → 계정별 컨텍스트 파일 재사용
- 캐시 세션이 만료되었는지 알 수 없음 → ARM 조회 + 캐시 토큰 프로브로 판정
- 로그인 분기(테넌트/구독/환경 조합) 중복 → LoginOptions 하나로 통합

구성:
- CredentialCacheManager: 캐시 재사용/재로그인 판단과 저장
- MsalBackend: MSAL 대화형 로그인 + ARM REST 검증
- CachedAccessTokenProbe: 세션 토큰 캐시 기반 보조 검증
- GraphDirectoryService: 보조 디렉토리(Microsoft Graph) 로그인

사용 예시:
    from core.auth import AccountProfile, create_manager

    manager = create_manager()
    session = manager.ensure_session(
        AccountProfile(
            parent_folder="~/.azctx/contexts",
            account_name="work",
            tenant_id="00000000-0000-0000-0000-000000000000",
        )
    )

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
    실제 사용 시점에만 하위 모듈이 로드되어 CLI 시작 시간을 최적화합니다.
"""

__all__ = [
    # Types
    "AccountProfile",
    "AuthBackend",
    "AutosaveMode",
    "Environment",
    "EnvironmentKind",
    "LoginOptions",
    "Session",
    "validate_account_name",
    "AuthError",
    "NotAuthenticatedError",
    "TokenExpiredError",
    "EnvironmentNotFoundError",
    "ConfigurationError",
    "ProviderError",
    # Cache
    "CacheRecord",
    "CacheRecordManager",
    "ensure_cache_folder",
    "list_records",
    # Environment
    "BUILTIN_ENVIRONMENTS",
    "EnvironmentRegistry",
    "build_stack_environment",
    # Config
    "BackendConfig",
    "load_config",
    # Providers
    "MsalBackend",
    "MsalBackendConfig",
    "DirectoryService",
    "GraphDirectoryService",
    "resolve_directory_service",
    # Probe
    "CachedAccessTokenProbe",
    # Manager
    "CredentialCacheManager",
    "EnsureResult",
    "EnsureState",
    "create_manager",
]

# Lazy import 매핑 테이블
_IMPORT_MAPPING = {
    # Types
    "AccountProfile": (".types", "AccountProfile"),
    "AuthBackend": (".types", "AuthBackend"),
    "AutosaveMode": (".types", "AutosaveMode"),
    "Environment": (".types", "Environment"),
    "EnvironmentKind": (".types", "EnvironmentKind"),
    "LoginOptions": (".types", "LoginOptions"),
    "Session": (".types", "Session"),
    "validate_account_name": (".types", "validate_account_name"),
    "AuthError": (".types", "AuthError"),
    "NotAuthenticatedError": (".types", "NotAuthenticatedError"),
    "TokenExpiredError": (".types", "TokenExpiredError"),
    "EnvironmentNotFoundError": (".types", "EnvironmentNotFoundError"),
    "ConfigurationError": (".types", "ConfigurationError"),
    "ProviderError": (".types", "ProviderError"),
    # Cache
    "CacheRecord": (".cache", "CacheRecord"),
    "CacheRecordManager": (".cache", "CacheRecordManager"),
    "ensure_cache_folder": (".cache", "ensure_cache_folder"),
    "list_records": (".cache", "list_records"),
    # Environment
    "BUILTIN_ENVIRONMENTS": (".environment", "BUILTIN_ENVIRONMENTS"),
    "EnvironmentRegistry": (".environment", "EnvironmentRegistry"),
    "build_stack_environment": (".environment", "build_stack_environment"),
    # Config
    "BackendConfig": (".config", "BackendConfig"),
    "load_config": (".config", "load_config"),
    # Providers
    "MsalBackend": (".provider", "MsalBackend"),
    "MsalBackendConfig": (".provider", "MsalBackendConfig"),
    "DirectoryService": (".provider", "DirectoryService"),
    "GraphDirectoryService": (".provider", "GraphDirectoryService"),
    "resolve_directory_service": (".provider", "resolve_directory_service"),
    # Probe
    "CachedAccessTokenProbe": (".probe", "CachedAccessTokenProbe"),
    # Manager
    "CredentialCacheManager": (".auth", "CredentialCacheManager"),
    "EnsureResult": (".auth", "EnsureResult"),
    "EnsureState": (".auth", "EnsureState"),
    "create_manager": (".auth", "create_manager"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드

    CLI 시작 시간 최적화를 위해 무거운 의존성(msal, requests)을
    실제 필요한 시점에만 로드합니다.
    """
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
