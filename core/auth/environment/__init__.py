# core/auth/environment/__init__.py
"""
Azure 환경(엔드포인트 집합) 모듈

- 내장 클라우드: AzureCloud, AzureUSGovernment, AzureChinaCloud
- Azure Stack 환경: 이름으로 ADMIN/USER 종류를 판별하여 엔드포인트 생성

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "BUILTIN_ENVIRONMENTS",
    "EnvironmentRegistry",
    "build_stack_environment",
    "detect_kind",
    "stack_endpoints",
]

_IMPORT_MAPPING = {
    "BUILTIN_ENVIRONMENTS": (".environment", "BUILTIN_ENVIRONMENTS"),
    "EnvironmentRegistry": (".environment", "EnvironmentRegistry"),
    "build_stack_environment": (".environment", "build_stack_environment"),
    "detect_kind": (".environment", "detect_kind"),
    "stack_endpoints": (".environment", "stack_endpoints"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
