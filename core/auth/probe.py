# core/auth/probe.py
"""
캐시된 액세스 토큰 프로브

ARM 조회 검증이 실패했을 때 쓰는 보조 유효성 신호입니다.
Session에 포함된 토큰 캐시만 읽으며, 파일이나 전역 상태는 보지 않습니다.
대화형 로그인은 절대 트리거하지 않습니다 (silent 획득만, refresh 허용).
"""

from __future__ import annotations

import logging

from .types import AuthBackend, AuthError, Session

logger = logging.getLogger(__name__)

# 고정 ARM audience
MANAGEMENT_AUDIENCE = "https://management.core.windows.net/"


class CachedAccessTokenProbe:
    """세션 토큰 캐시에서 ARM 액세스 토큰을 꺼내 보는 프로브

    Example:
        probe = CachedAccessTokenProbe(backend)
        if probe.try_get_cached_token(session):
            ...  # 캐시 세션 재사용
    """

    def __init__(self, backend: AuthBackend, audience: str = MANAGEMENT_AUDIENCE):
        self._backend = backend
        self._audience = audience

    @property
    def audience(self) -> str:
        return self._audience

    def try_get_cached_token(self, session: Session | None) -> str | None:
        """캐시된 토큰 조회

        Args:
            session: 대상 세션 (None이면 즉시 None)

        Returns:
            원시 액세스 토큰 문자열 또는 None
        """
        if session is None or not session.account_id:
            return None

        try:
            token = self._backend.get_cached_token(session, self._audience)
        except AuthError as e:
            logger.debug("토큰 프로브 실패 [%s]: %s", session.account_id, e)
            return None

        return token or None
