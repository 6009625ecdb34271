# core/__init__.py
"""
core - azctx 인프라

인증(컨텍스트 캐시), 설정, 예외 계층을 포함하는 최상위 패키지입니다.

아키텍처:
    core/
    ├── auth/           # Azure 컨텍스트 캐시 서브시스템
    ├── config.py       # 중앙 설정 관리
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 설정 사용
    from core.config import settings, get_config_dir
    config_dir = get_config_dir()  # ~/.azctx

    # 예외 처리
    from core.exceptions import APICallError, is_access_denied
    try:
        subscriptions = backend.fetch_metadata(url)
    except APICallError as e:
        if is_access_denied(e):
            print("권한이 없습니다")

    # 인증
    from core.auth import AccountProfile, create_manager
    manager = create_manager()
    manager.ensure_session(AccountProfile("~/.azctx/contexts", "work"))
"""

from core import auth, config, exceptions

__all__: list[str] = [
    # 서브패키지
    "auth",
    # 모듈
    "config",
    "exceptions",
]
