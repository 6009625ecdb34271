"""
tests/conftest.py - pytest 공통 픽스처

인메모리 인증 백엔드와 임시 캐시 폴더 기반 프로파일을 제공합니다.

Usage:
    def test_something(fake_backend, make_profile):
        # fake_backend: 호출 기록을 남기는 AuthBackend
        # make_profile: tmp_path 아래 캐시 폴더를 쓰는 AccountProfile 생성기
        pass
"""

import sys
from pathlib import Path
from typing import Any

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.auth.cache import CacheRecord, read_record, write_record  # noqa: E402
from core.auth.types import (  # noqa: E402
    AccountProfile,
    AuthBackend,
    AutosaveMode,
    ConfigurationError,
    Environment,
    LoginOptions,
    ProviderError,
    Session,
)

TENANT_ID = "72f988bf-86f1-41af-91ab-2d7cd011db47"
SUB_A = "11111111-1111-1111-1111-111111111111"
SUB_B = "22222222-2222-2222-2222-222222222222"


# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment(tmp_path, monkeypatch):
    """테스트 환경 설정

    설정 디렉토리를 임시 폴더로 돌리고 동작에 영향을 주는 환경변수를 지웁니다.
    """
    monkeypatch.setenv("AZCTX_HOME", str(tmp_path / "azctx_home"))
    for name in (
        "AZCTX_CACHE_FOLDER",
        "AZCTX_CONTEXT_AUTOSAVE",
        "AZCTX_DIRECTORY",
        "AZCTX_DIRECTORY_UNSUPPORTED_PLATFORMS",
        "AZCTX_API_TIMEOUT",
        "AZCTX_STACK_REGION",
        "AZCTX_STACK_FQDN",
    ):
        monkeypatch.delenv(name, raising=False)

    from cli.i18n import set_lang

    set_lang("ko")

    yield


# =============================================================================
# Fake Backend
# =============================================================================


class FakeBackend(AuthBackend):
    """호출 기록을 남기는 인메모리 백엔드

    save/load는 실제 컨텍스트 파일 형식으로 디스크에 기록합니다.

    Attributes:
        valid: validate_by_query 유효 여부
        refreshed_cache: 검증 중 갱신된 것처럼 돌려줄 토큰 캐시 (None이면 그대로)
        cached_token: get_cached_token 결과
        login_result: interactive_login 결과 (None이면 실패)
        login_error: interactive_login에서 발생시킬 예외
        select_error: select_subscription에서 발생시킬 예외
    """

    stray_artifact_patterns = (".*.tmp", "*.lockfile")

    def __init__(
        self,
        valid: bool = True,
        cached_token: str | None = None,
        login_result: Session | None = None,
        autosave: AutosaveMode = AutosaveMode.PROCESS,
    ):
        self.valid = valid
        self.refreshed_cache: str | None = None
        self.cached_token = cached_token
        self.login_result = login_result
        self.login_error: Exception | None = None
        self.select_error: Exception | None = None
        self.environments: dict[str, Environment] = {}
        self._autosave = autosave

        self.calls: list[str] = []
        self.saves: list[tuple[Session, Path]] = []
        self.login_options: list[LoginOptions] = []
        self.validate_args: list[tuple[Session, str | None, str | None]] = []
        self.token_audiences: list[str] = []
        self.autosave_changes: list[AutosaveMode] = []
        self.closed = False

    def name(self) -> str:
        return "fake"

    @property
    def autosave_mode(self) -> AutosaveMode:
        return self._autosave

    def set_autosave_mode(self, mode: AutosaveMode) -> None:
        self.autosave_changes.append(mode)
        self._autosave = mode

    def load_session(self, path: Path) -> Session | None:
        self.calls.append("load")
        record = read_record(path)
        if record is None or record.is_empty():
            return None
        context = record.default_context
        if not isinstance(context, dict):
            raise ConfigurationError("기본 컨텍스트가 없습니다", config_key=str(path))
        subscription = context.get("Subscription") or {}
        return Session(
            account_id=context["Account"]["Id"],
            tenant_id=context["Tenant"]["Id"],
            subscription_id=subscription.get("Id"),
            environment_name=context["Environment"]["Name"],
            token_cache=context.get("TokenCache", {}).get("CacheData", ""),
        )

    def save_session(self, session: Session, path: Path) -> None:
        self.calls.append("save")
        self.saves.append((session, path))
        record = CacheRecord.empty()
        record.contexts[record.default_context_key] = {
            "Account": {"Id": session.account_id},
            "Tenant": {"Id": session.tenant_id},
            "Subscription": {"Id": session.subscription_id} if session.subscription_id else None,
            "Environment": {"Name": session.environment_name},
            "TokenCache": {"CacheData": session.token_cache},
        }
        write_record(path, record)

    def interactive_login(self, options: LoginOptions) -> Session | None:
        self.calls.append("login")
        self.login_options.append(options)
        if self.login_error is not None:
            raise self.login_error
        return self.login_result

    def validate_by_query(
        self, session: Session, tenant_id: str | None, subscription_id: str | None
    ) -> Session | None:
        self.calls.append("validate")
        self.validate_args.append((session, tenant_id, subscription_id))
        if not self.valid:
            return None
        if self.refreshed_cache is not None:
            return session.with_token_cache(self.refreshed_cache)
        return session

    def select_subscription(self, session: Session, subscription_id: str, tenant_id: str | None) -> Session:
        self.calls.append("select")
        if self.select_error is not None:
            raise self.select_error
        return session.with_subscription(subscription_id)

    def get_cached_token(self, session: Session, audience: str) -> str | None:
        self.calls.append("token")
        self.token_audiences.append(audience)
        return self.cached_token

    def register_environment(self, environment: Environment) -> None:
        self.calls.append("register")
        self.environments[environment.name] = environment

    def list_known_environments(self) -> set[str]:
        return {"AzureCloud", "AzureUSGovernment", "AzureChinaCloud", *self.environments}

    def close(self) -> None:
        self.closed = True


def make_session(subscription_id: str | None = SUB_A, **overrides: Any) -> Session:
    """테스트용 Session 생성"""
    values: dict[str, Any] = {
        "account_id": "user@contoso.com",
        "tenant_id": TENANT_ID,
        "subscription_id": subscription_id,
        "token_cache": '{"AccessToken": {}}',
    }
    values.update(overrides)
    return Session(**values)


@pytest.fixture
def fake_backend():
    """기본 FakeBackend (캐시 세션 유효, 로그인 성공)"""
    return FakeBackend(login_result=make_session())


@pytest.fixture
def cache_folder(tmp_path):
    """계정 캐시 폴더 경로 (아직 생성되지 않음)"""
    return tmp_path / "contexts"


@pytest.fixture
def make_profile(cache_folder):
    """AccountProfile 생성기"""

    def _make(account_name: str = "work", **kwargs: Any) -> AccountProfile:
        kwargs.setdefault("tenant_id", TENANT_ID)
        return AccountProfile(parent_folder=cache_folder, account_name=account_name, **kwargs)

    return _make


@pytest.fixture
def provider_error():
    """구독 전환 실패용 ProviderError"""
    return ProviderError("fake", "select_subscription", SUB_B)
