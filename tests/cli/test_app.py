"""
tests/cli/test_app.py - cli/app.py 테스트

Click CliRunner로 명령어를 실행하여 검증합니다.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from cli.app import VERSION, _build_help_text, cli, get_version
from core.auth import CredentialCacheManager
from core.auth.types import ProviderError
from tests.conftest import SUB_A, TENANT_ID, FakeBackend, make_session


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def wide_console(monkeypatch):
    """테이블 셀이 줄바꿈되지 않도록 콘솔 폭 확대"""
    from cli.ui.console import console

    monkeypatch.setattr(console, "width", 200)


class TestGetVersion:
    """get_version 함수 테스트"""

    def test_version_from_config(self):
        """core.config의 버전과 동일"""
        from core.config import get_version as config_get_version

        assert get_version() == config_get_version()

    def test_version_constant_set(self):
        assert VERSION == get_version()


class TestCLI:
    """CLI 그룹 테스트"""

    def test_version_option(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert VERSION in result.output
        assert "azctx" in result.output

    def test_help_option(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "login" in result.output
        assert "accounts" in result.output
        assert "env" in result.output

    def test_login_requires_account(self, runner):
        result = runner.invoke(cli, ["login"])

        assert result.exit_code == 2
        assert "--account" in result.output


class TestBuildHelpText:
    """_build_help_text 함수 테스트"""

    def test_help_text_korean(self):
        text = _build_help_text("ko")
        assert "azctx" in text
        assert "[기본 사용법]" in text

    def test_help_text_english(self):
        text = _build_help_text("en")
        assert "Azure context cache" in text
        assert "azctx login" in text


class TestLoginCommand:
    """login 명령어 테스트"""

    def test_first_login(self, runner, tmp_path):
        """캐시가 없으면 로그인 후 저장, 종료 코드 0"""
        backend = FakeBackend(login_result=make_session())

        with patch("cli.headless.create_manager", return_value=CredentialCacheManager(backend)):
            result = runner.invoke(cli, ["login", "-d", str(tmp_path), "-a", "work", "-t", TENANT_ID])

        assert result.exit_code == 0
        assert (tmp_path / "work.json").exists()
        assert backend.calls == ["login", "save", "load"]

    def test_login_failure_exit_code(self, runner, tmp_path):
        backend = FakeBackend(login_result=None)

        with patch("cli.headless.create_manager", return_value=CredentialCacheManager(backend)):
            result = runner.invoke(cli, ["login", "-d", str(tmp_path), "-a", "work"])

        assert result.exit_code == 1

    def test_options_passed_to_profile(self, runner, tmp_path):
        """-t/-s/-e 옵션이 로그인 옵션으로 전달"""
        backend = FakeBackend(login_result=make_session())

        with patch("cli.headless.create_manager", return_value=CredentialCacheManager(backend)):
            runner.invoke(
                cli,
                ["login", "-d", str(tmp_path), "-a", "work", "-t", TENANT_ID, "-s", SUB_A, "-e", "AzureCloud"],
            )

        options = backend.login_options[0]
        assert options.tenant_id == TENANT_ID
        assert options.subscription_id == SUB_A
        assert options.environment_name == "AzureCloud"

    def test_invalid_account_name(self, runner, tmp_path):
        with patch("cli.headless.create_manager") as mock_create:
            result = runner.invoke(cli, ["login", "-d", str(tmp_path / "ctx"), "-a", "a/b"])

        assert result.exit_code == 1
        mock_create.assert_not_called()
        assert not (tmp_path / "ctx").exists()

    def test_keyboard_interrupt(self, runner, tmp_path):
        manager = MagicMock()
        manager.ensure.side_effect = KeyboardInterrupt()

        with patch("cli.headless.create_manager", return_value=manager):
            result = runner.invoke(cli, ["login", "-d", str(tmp_path), "-a", "work"])

        assert result.exit_code == 130

    def test_no_directory_option(self, runner, tmp_path):
        backend = FakeBackend(login_result=make_session())

        with patch("cli.headless.create_manager", return_value=CredentialCacheManager(backend)) as mock_create:
            runner.invoke(cli, ["--no-directory", "login", "-d", str(tmp_path), "-a", "work"])

        mock_create.assert_called_once_with(directory_enabled=False)

    def test_english_output(self, runner, tmp_path):
        backend = FakeBackend(login_result=make_session())

        with patch("cli.headless.create_manager", return_value=CredentialCacheManager(backend)):
            result = runner.invoke(cli, ["--lang", "en", "login", "-d", str(tmp_path), "-a", "work"])

        assert "No cached context found" in result.output


class TestAccountsCommand:
    """accounts 명령어 테스트"""

    @pytest.fixture
    def populated(self, tmp_path):
        """work, lab 계정과 손상된 broken 계정이 있는 폴더"""
        folder = tmp_path / "contexts"
        backend = FakeBackend()
        backend.save_session(make_session(), folder / "work.json")
        backend.save_session(make_session(subscription_id=None, environment_name="AzureChinaCloud"), folder / "lab.json")
        (folder / "broken.json").write_text("{not json", encoding="utf-8")
        (folder / "empty.json").write_text("{}", encoding="utf-8")
        return folder

    def test_json_output(self, runner, populated):
        result = runner.invoke(cli, ["accounts", "-d", str(populated), "--json"])

        assert result.exit_code == 0
        rows = {row["account"]: row for row in json.loads(result.output)}
        assert set(rows) == {"work", "lab", "broken"}
        assert rows["work"]["tenant"] == TENANT_ID
        assert rows["work"]["subscription"] == SUB_A
        assert rows["lab"]["subscription"] == ""
        assert rows["lab"]["environment"] == "AzureChinaCloud"
        assert rows["broken"]["environment"] == "(읽을 수 없음)"

    def test_wrong_shapes_listed_as_unreadable(self, runner, tmp_path):
        """객체가 아닌 컨텍스트나 섹션이 있어도 목록은 끝까지 출력"""
        folder = tmp_path / "contexts"
        folder.mkdir()
        (folder / "odd.json").write_text(json.dumps({"Contexts": {"Default": "oops"}}), encoding="utf-8")
        (folder / "listy.json").write_text(json.dumps({"Contexts": [1, 2]}), encoding="utf-8")
        (folder / "partial.json").write_text(
            json.dumps({"Contexts": {"Default": {"Tenant": "contoso", "Environment": {"Name": "AzureCloud"}}}}),
            encoding="utf-8",
        )

        result = runner.invoke(cli, ["accounts", "-d", str(folder), "--json"])

        assert result.exit_code == 0
        rows = {row["account"]: row for row in json.loads(result.output)}
        assert rows["odd"]["environment"] == "(읽을 수 없음)"
        assert rows["listy"]["environment"] == "(읽을 수 없음)"
        assert rows["partial"]["tenant"] == ""
        assert rows["partial"]["environment"] == "AzureCloud"

    def test_table_output(self, runner, populated, wide_console):
        result = runner.invoke(cli, ["accounts", "-d", str(populated)])

        assert result.exit_code == 0
        assert "work" in result.output
        assert "lab" in result.output

    def test_empty_folder(self, runner, tmp_path):
        result = runner.invoke(cli, ["--lang", "en", "accounts", "-d", str(tmp_path / "none")])

        assert result.exit_code == 0
        assert "No cached accounts" in result.output

    def test_default_folder_from_env(self, runner, tmp_path, monkeypatch):
        folder = tmp_path / "env_contexts"
        FakeBackend().save_session(make_session(), folder / "ops.json")
        monkeypatch.setenv("AZCTX_CACHE_FOLDER", str(folder))

        result = runner.invoke(cli, ["accounts", "--json"])

        assert [row["account"] for row in json.loads(result.output)] == ["ops"]


class TestEnvCommand:
    """env 명령어 테스트"""

    def test_list_builtin(self, runner):
        result = runner.invoke(cli, ["env", "list", "--json"])

        assert result.exit_code == 0
        names = [env["Name"] for env in json.loads(result.output)]
        assert "AzureCloud" in names
        assert "AzureUSGovernment" in names

    def test_list_table(self, runner, wide_console):
        result = runner.invoke(cli, ["env", "list"])

        assert result.exit_code == 0
        assert "AzureCloud" in result.output
        assert "builtin" in result.output

    def test_add_admin_environment(self, runner):
        backend = FakeBackend()

        with patch("core.auth.provider.MsalBackend", return_value=backend):
            result = runner.invoke(cli, ["env", "add", "AzureStackAdmin", "--region", "east", "--fqdn", "contoso.com"])

        assert result.exit_code == 0
        environment = backend.environments["AzureStackAdmin"]
        assert environment.resource_manager_url == "https://adminmanagement.east.contoso.com/"
        assert backend.closed is True

    def test_add_existing_environment(self, runner):
        """이미 알려진 이름은 대소문자 무관하게 거부"""
        backend = FakeBackend()

        with patch("core.auth.provider.MsalBackend", return_value=backend):
            result = runner.invoke(cli, ["env", "add", "azurecloud"])

        assert result.exit_code == 1
        assert "register" not in backend.calls
        assert backend.closed is True

    def test_add_failure(self, runner):
        backend = FakeBackend()
        backend.register_environment = MagicMock(side_effect=ProviderError("msal", "register", "denied"))

        with patch("core.auth.provider.MsalBackend", return_value=backend):
            result = runner.invoke(cli, ["--lang", "en", "env", "add", "AzureStackUser"])

        assert result.exit_code == 1
        assert "[msal] register: denied" in result.output
        assert backend.closed is True
