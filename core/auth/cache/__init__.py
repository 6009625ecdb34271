# core/auth/cache/__init__.py
"""
계정 컨텍스트 캐시 파일 관리 모듈

계정마다 하나의 컨텍스트 파일({parent_folder}/{account_name}.json)을 두어
셸 세션마다 재인증하지 않도록 합니다.

캐시 전략:
- CacheRecord: 파일 기반 - 계정당 Session 하나
- empty.json: 폴더마다 한 번 기록하는 빈 레코드

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
"""

__all__ = [
    "CacheRecord",
    "CacheRecordManager",
    "EMPTY_RECORD",
    "read_record",
    "write_record",
    "ensure_cache_folder",
    "cleanup_stray_artifacts",
    "list_records",
]

_IMPORT_MAPPING = {
    "CacheRecord": (".cache", "CacheRecord"),
    "CacheRecordManager": (".cache", "CacheRecordManager"),
    "EMPTY_RECORD": (".cache", "EMPTY_RECORD"),
    "read_record": (".cache", "read_record"),
    "write_record": (".cache", "write_record"),
    "ensure_cache_folder": (".cache", "ensure_cache_folder"),
    "cleanup_stray_artifacts": (".cache", "cleanup_stray_artifacts"),
    "list_records": (".cache", "list_records"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
