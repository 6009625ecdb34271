# core/auth/provider/__init__.py
"""
인증 백엔드 구현 모듈

백엔드 목록:
- MsalBackend: MSAL 대화형 로그인 + ARM REST 검증
- GraphDirectoryService: Microsoft Graph 보조 디렉토리 로그인

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # MSAL
    "MsalBackend",
    "MsalBackendConfig",
    # Directory
    "DirectoryService",
    "GraphDirectoryService",
    "resolve_directory_service",
]

_IMPORT_MAPPING = {
    "MsalBackend": (".msal_backend", "MsalBackend"),
    "MsalBackendConfig": (".msal_backend", "MsalBackendConfig"),
    "DirectoryService": (".directory", "DirectoryService"),
    "GraphDirectoryService": (".directory", "GraphDirectoryService"),
    "resolve_directory_service": (".directory", "resolve_directory_service"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
