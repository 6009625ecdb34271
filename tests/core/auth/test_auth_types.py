# tests/core/auth/test_auth_types.py
"""
core/auth/types/types.py 단위 테스트

Environment, Session, LoginOptions, AccountProfile, 계정 이름 검증, 에러 클래스 테스트.
"""

from pathlib import Path

import pytest

from core.auth.types import (
    AccountProfile,
    AuthBackend,
    AuthError,
    AutosaveMode,
    ConfigurationError,
    Environment,
    EnvironmentKind,
    EnvironmentNotFoundError,
    LoginOptions,
    NotAuthenticatedError,
    ProviderError,
    Session,
    TokenExpiredError,
    validate_account_name,
)
from core.exceptions import AzctxError, ValidationError

# =============================================================================
# Enum 테스트
# =============================================================================


class TestEnums:
    """EnvironmentKind, AutosaveMode 테스트"""

    def test_environment_kind_values(self):
        assert EnvironmentKind.BUILTIN.value == "builtin"
        assert EnvironmentKind.ADMIN.value == "admin"
        assert EnvironmentKind.USER.value == "user"

    def test_environment_kind_str(self):
        """str 변환은 값 그대로"""
        assert str(EnvironmentKind.ADMIN) == "admin"

    def test_autosave_values(self):
        assert AutosaveMode.CURRENT_USER.value == "CurrentUser"
        assert AutosaveMode.PROCESS.value == "Process"


# =============================================================================
# Environment 테스트
# =============================================================================


@pytest.fixture
def stack_env():
    return Environment(
        name="AzureStackAdmin",
        resource_manager_url="https://adminmanagement.local.azurestack.external/",
        active_directory_authority="https://login.microsoftonline.com/",
        management_audience="https://adminmanagement.contoso.onmicrosoft.com/abcd",
        key_vault_dns_suffix="adminvault.local.azurestack.external",
        kind=EnvironmentKind.ADMIN,
    )


class TestEnvironment:
    """Environment 테스트"""

    def test_authority_for_tenant(self, stack_env):
        assert stack_env.authority_for("contoso.com") == "https://login.microsoftonline.com/contoso.com"

    def test_authority_without_tenant(self, stack_env):
        """테넌트가 없으면 organizations"""
        assert stack_env.authority_for(None) == "https://login.microsoftonline.com/organizations"

    def test_management_scope(self, stack_env):
        assert stack_env.management_scope == "https://adminmanagement.contoso.onmicrosoft.com/abcd/.default"

    def test_dict_roundtrip(self, stack_env):
        """to_dict/from_dict 변환"""
        data = stack_env.to_dict()

        assert data["Name"] == "AzureStackAdmin"
        assert data["Kind"] == "admin"
        assert Environment.from_dict(data) == stack_env

    def test_from_dict_defaults_to_builtin(self):
        env = Environment.from_dict({"Name": "Custom"})
        assert env.kind == EnvironmentKind.BUILTIN
        assert env.graph_url is None


# =============================================================================
# Session 테스트
# =============================================================================


class TestSession:
    """Session 테스트"""

    def test_defaults(self):
        session = Session(account_id="user@contoso.com", tenant_id="t1")
        assert session.environment_name == "AzureCloud"
        assert session.subscription_id is None
        assert session.token_cache == ""

    def test_with_subscription_returns_new(self):
        """구독 전환은 새 객체 반환"""
        session = Session(account_id="u", tenant_id="t", subscription_id="a")
        switched = session.with_subscription("b", "Production")

        assert switched is not session
        assert switched.subscription_id == "b"
        assert switched.subscription_name == "Production"
        assert session.subscription_id == "a"

    def test_frozen(self):
        session = Session(account_id="u", tenant_id="t")
        with pytest.raises(Exception):  # FrozenInstanceError
            session.tenant_id = "other"

    def test_token_cache_hidden_in_repr(self):
        session = Session(account_id="u", tenant_id="t", token_cache="SECRET")
        assert "SECRET" not in repr(session)

    def test_with_token_cache(self):
        session = Session(account_id="u", tenant_id="t")
        assert session.with_token_cache("{}").token_cache == "{}"


# =============================================================================
# 계정 이름 검증 / AccountProfile
# =============================================================================


class TestValidateAccountName:
    """validate_account_name 테스트"""

    @pytest.mark.parametrize("name", ["work", "personal-dev", "team.prod", "계정1"])
    def test_valid_names(self, name):
        assert validate_account_name(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "   ", ".", "..", "a/b", "a\\b", "../work", "a:b", "a*b", "a?b", 'a"b', "a<b", "a|b", "a\0b", " work", "work."],
    )
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_account_name(name)
        assert exc_info.value.field == "account_name"


class TestAccountProfile:
    """AccountProfile 테스트"""

    def test_parent_folder_coerced_to_path(self, tmp_path):
        profile = AccountProfile(parent_folder=str(tmp_path), account_name="work")
        assert profile.parent_folder == tmp_path

    def test_parent_folder_expanded(self):
        """~ 경로 확장"""
        profile = AccountProfile(parent_folder="~/contexts", account_name="work")
        assert profile.parent_folder == Path("~/contexts").expanduser()

    def test_invalid_name_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            AccountProfile(parent_folder=tmp_path, account_name="..")

    def test_login_options(self, tmp_path):
        profile = AccountProfile(
            parent_folder=tmp_path,
            account_name="work",
            tenant_id="t1",
            environment_name="AzureStackUser",
        )
        assert profile.login_options() == LoginOptions(
            tenant_id="t1", subscription_id=None, environment_name="AzureStackUser"
        )


# =============================================================================
# AuthBackend 테스트
# =============================================================================


class TestAuthBackend:
    """AuthBackend 추상 클래스 테스트"""

    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            AuthBackend()

    def test_fake_backend_is_backend(self, fake_backend):
        assert isinstance(fake_backend, AuthBackend)
        assert fake_backend.stray_artifact_patterns


# =============================================================================
# 에러 클래스 테스트
# =============================================================================


class TestErrors:
    """에러 클래스 테스트"""

    def test_hierarchy(self):
        for error in (
            NotAuthenticatedError(),
            TokenExpiredError(),
            EnvironmentNotFoundError("X"),
            ConfigurationError("bad"),
            ProviderError("msal", "login", "fail"),
        ):
            assert isinstance(error, AuthError)
            assert isinstance(error, AzctxError)

    def test_provider_error_format(self):
        error = ProviderError("msal", "select_subscription", "not found")
        assert str(error) == "[msal] select_subscription: not found"
        assert error.provider == "msal"
        assert error.operation == "select_subscription"

    def test_cause_chained_in_str(self):
        error = ConfigurationError("파싱 실패", config_key="a.json", cause=ValueError("bad json"))
        assert "bad json" in str(error)
        assert error.config_key == "a.json"

    def test_environment_not_found(self):
        error = EnvironmentNotFoundError("AzureStackX")
        assert error.environment_name == "AzureStackX"
