# core/auth/auth.py
"""
계정 컨텍스트 캐시 매니저

셸 세션마다 다시 로그인하지 않도록 계정별 컨텍스트 파일을 관리합니다.

흐름 (호출 1회):
    1. 계정 이름 검증, 캐시 폴더/empty.json 준비
    2. 모르는 환경이면 등록
    3. 캐시 파일 없음 → 대화형 로그인
       캐시 파일 있음 → 로드 → (필요 시) 구독 전환 + 저장 → ARM 조회 검증
                      → 실패 시 캐시 토큰 프로브 → 그래도 실패면 대화형 로그인
       검증 중 msal이 토큰 캐시를 갱신하면 캐시 파일에 다시 저장
    4. 로그인 성공 시 저장 후 디스크에서 다시 로드해 확인
    5. (선택) 보조 디렉토리 로그인

상태 전이:
    NoCache → InteractiveLogin → Persisted
    HasCache → Probing → Valid | InteractiveLogin → Persisted
    어느 경로든 실패하면 Failed

Usage:
    from core.auth import AccountProfile, create_manager

    manager = create_manager()
    result = manager.ensure(AccountProfile("~/.azctx/contexts", "work", tenant_id="..."))
    if result.success:
        print(result.session.subscription_id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from cli.i18n import t
from cli.ui.console import print_error, print_info, print_success, print_warning

from .cache import CacheRecordManager, cleanup_stray_artifacts, ensure_cache_folder
from .environment import build_stack_environment
from .probe import CachedAccessTokenProbe
from .provider import DirectoryService
from .types import (
    AccountProfile,
    AuthBackend,
    AuthError,
    AutosaveMode,
    ConfigurationError,
    Session,
    validate_account_name,
)

logger = logging.getLogger(__name__)


class EnsureState(Enum):
    """ensure 결과 상태

    - VALID: 캐시된 세션을 그대로 재사용
    - PERSISTED: 대화형 로그인 후 새로 저장
    - FAILED: 로그인 실패 (캐시 파일 변경 없음)
    """

    VALID = "valid"
    PERSISTED = "persisted"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass
class EnsureResult:
    """ensure 결과

    Attributes:
        state: 종료 상태
        cache_file: 계정 캐시 파일 경로
        session: 확보된 세션 (실패 시 None)
        directory_domain: 보조 디렉토리 로그인 도메인 (미수행/실패 시 None)
        directory_error: 보조 디렉토리 로그인 에러 메시지
    """

    state: EnsureState
    cache_file: Path
    session: Session | None = None
    directory_domain: str | None = None
    directory_error: str | None = None

    @property
    def success(self) -> bool:
        return self.state != EnsureState.FAILED

    @property
    def logged_in(self) -> bool:
        """이번 호출에서 대화형 로그인이 수행되었는지"""
        return self.state == EnsureState.PERSISTED


class CredentialCacheManager:
    """계정 컨텍스트 캐시 매니저

    백엔드와 파일 시스템만 다루며 Session 내부는 해석하지 않습니다.
    디렉토리 서비스는 시작 시 한 번 결정되어 주입됩니다.
    """

    def __init__(
        self,
        backend: AuthBackend,
        directory: DirectoryService | None = None,
        token_probe: CachedAccessTokenProbe | None = None,
    ):
        """CredentialCacheManager 초기화

        Args:
            backend: 인증 백엔드
            directory: 보조 디렉토리 서비스 (None이면 보조 로그인 생략)
            token_probe: 캐시 토큰 프로브 (기본: backend로 생성)
        """
        self._backend = backend
        self._directory = directory
        self._probe = token_probe or CachedAccessTokenProbe(backend)

        # 사용자 공용 자동 저장이 켜져 있으면 프로세스 범위로 낮춤
        if backend.autosave_mode == AutosaveMode.CURRENT_USER:
            backend.set_autosave_mode(AutosaveMode.PROCESS)
            logger.info("컨텍스트 자동 저장 범위를 Process로 변경")

    @property
    def backend(self) -> AuthBackend:
        return self._backend

    @property
    def directory(self) -> DirectoryService | None:
        return self._directory

    # =========================================================================
    # Public API
    # =========================================================================

    def ensure_session(self, profile: AccountProfile) -> Session | None:
        """유효한 세션 확보 (캐시 재사용 또는 대화형 로그인)

        Returns:
            Session 또는 None (로그인 실패)
        """
        return self.ensure(profile).session

    def ensure(self, profile: AccountProfile) -> EnsureResult:
        """ensure_session과 같지만 상세 결과를 반환

        Raises:
            ValidationError: 계정 이름이 파일명으로 안전하지 않은 경우
        """
        validate_account_name(profile.account_name)

        cache = CacheRecordManager(profile.parent_folder, profile.account_name)
        ensure_cache_folder(profile.parent_folder)

        if profile.environment_name:
            self._ensure_environment(profile.environment_name)

        if not cache.exists():
            print_info(t("auth.first_login", account=profile.account_name))
        else:
            session = self._reuse_cached(profile, cache)
            if session is not None:
                print_success(t("auth.cached_session_valid", account=profile.account_name))
                result = EnsureResult(EnsureState.VALID, cache.cache_path, session=session)
                return self._directory_login(result)

            logger.warning("캐시 세션 만료, 재인증 필요: %s", cache.cache_path)
            print_warning(t("auth.session_expired", account=profile.account_name))

        session = self._login(profile, cache)
        if session is None:
            return EnsureResult(EnsureState.FAILED, cache.cache_path)

        result = EnsureResult(EnsureState.PERSISTED, cache.cache_path, session=session)
        return self._directory_login(result)

    # =========================================================================
    # 내부 단계
    # =========================================================================

    def _ensure_environment(self, environment_name: str) -> None:
        """백엔드가 모르는 환경 이름이면 Azure Stack 환경으로 등록"""
        known = {name.lower() for name in self._backend.list_known_environments()}
        if environment_name.lower() in known:
            return

        environment = build_stack_environment(environment_name)
        logger.info("환경 등록: %s (%s)", environment.name, environment.kind)
        self._backend.register_environment(environment)
        print_info(t("auth.environment_registered", name=environment.name, url=environment.resource_manager_url))

    def _reuse_cached(self, profile: AccountProfile, cache: CacheRecordManager) -> Session | None:
        """캐시 파일의 세션이 아직 유효하면 반환, 아니면 None"""
        cleanup_stray_artifacts(
            profile.parent_folder,
            self._backend.stray_artifact_patterns,
            keep=[cache.cache_path],
        )

        try:
            session = self._backend.load_session(cache.cache_path)
        except ConfigurationError as e:
            logger.warning("캐시 파일을 읽을 수 없음: %s (%s)", cache.cache_path, e)
            print_warning(t("auth.cache_unreadable", path=str(cache.cache_path)))
            return None
        if session is None:
            return None

        requested = profile.subscription_id
        if requested and (session.subscription_id or "").lower() != requested.lower():
            try:
                session = self._backend.select_subscription(session, requested, profile.tenant_id)
            except AuthError as e:
                logger.warning("구독 전환 실패 [%s]: %s", requested, e)
                return None
            self._backend.save_session(session, cache.cache_path)
            print_info(t("auth.subscription_switched", subscription=requested))

        try:
            validated = self._backend.validate_by_query(session, profile.tenant_id, session.subscription_id)
        except AuthError as e:
            logger.debug("검증 조회 실패: %s", e)
            validated = None
        if validated is not None:
            self._save_refreshed(session, validated, cache.cache_path)
            return validated

        if self._probe.try_get_cached_token(session):
            logger.debug("캐시 토큰으로 세션 유효 판정: %s", profile.account_name)
            return session
        return None

    def _login(self, profile: AccountProfile, cache: CacheRecordManager) -> Session | None:
        """대화형 로그인 후 저장 및 재로드

        실패하면 캐시 파일을 건드리지 않습니다.
        """
        try:
            session = self._backend.interactive_login(profile.login_options())
        except AuthError as e:
            logger.error("대화형 로그인 에러: %s", e)
            session = None

        if session is None:
            print_error(t("auth.login_failed", account=profile.account_name))
            return None

        try:
            self._backend.save_session(session, cache.cache_path)
            reloaded = self._backend.load_session(cache.cache_path)
        except (OSError, AuthError) as e:
            logger.error("컨텍스트 저장 실패: %s (%s)", cache.cache_path, e)
            print_error(t("auth.save_failed", account=profile.account_name, path=str(cache.cache_path)))
            return None

        if reloaded is None:
            print_error(t("auth.save_failed", account=profile.account_name, path=str(cache.cache_path)))
            return None

        print_success(t("auth.login_success", account=profile.account_name, user=reloaded.account_id))
        return reloaded

    def _save_refreshed(self, previous: Session, session: Session, path: Path) -> None:
        """토큰 캐시가 갱신되었으면 컨텍스트 파일에 다시 저장 (실패해도 세션은 유효)"""
        if session.token_cache == previous.token_cache:
            return
        try:
            self._backend.save_session(session, path)
        except (OSError, AuthError) as e:
            logger.warning("갱신된 토큰 캐시 저장 실패: %s (%s)", path, e)
            return
        logger.debug("갱신된 토큰 캐시 저장: %s", path)

    def _directory_login(self, result: EnsureResult) -> EnsureResult:
        """보조 디렉토리 로그인 (실패해도 기본 결과는 유지)"""
        if self._directory is None or result.session is None:
            return result

        session = result.session
        try:
            domain, refreshed = self._directory.login(session)
        except AuthError as e:
            logger.warning("디렉토리 로그인 실패 [%s]: %s", session.tenant_id, e)
            result.directory_error = str(e)
            print_error(t("auth.directory_failed", domain=session.tenant_id))
            return result

        self._save_refreshed(session, refreshed, result.cache_file)
        result.session = refreshed
        result.directory_domain = domain
        print_success(t("auth.directory_success", domain=domain))
        return result


def create_manager(
    backend: AuthBackend | None = None,
    directory_enabled: bool | None = None,
) -> CredentialCacheManager:
    """기본 구성의 매니저 생성

    Args:
        backend: 인증 백엔드 (기본: MsalBackend)
        directory_enabled: 보조 디렉토리 로그인 사용 여부 (기본: AZCTX_DIRECTORY)

    Returns:
        CredentialCacheManager
    """
    from .provider import MsalBackend, resolve_directory_service

    if backend is None:
        backend = MsalBackend()

    directory = None
    if isinstance(backend, MsalBackend):
        directory = resolve_directory_service(backend, enabled=directory_enabled)

    return CredentialCacheManager(backend, directory=directory)
