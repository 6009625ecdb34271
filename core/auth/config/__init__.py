# core/auth/config/__init__.py
"""
백엔드 주변(ambient) 설정 모듈

{config_dir}/settings.json을 읽어 컨텍스트 자동 저장 범위 등을 결정합니다.

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    # Data classes
    "BackendConfig",
    # Functions
    "load_config",
    "parse_autosave_mode",
]

_IMPORT_MAPPING = {
    "BackendConfig": (".loader", "BackendConfig"),
    "load_config": (".loader", "load_config"),
    "parse_autosave_mode": (".loader", "parse_autosave_mode"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
