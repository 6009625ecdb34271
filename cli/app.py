"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

주요 기능:
    - 계정 컨텍스트 확보 (캐시 재사용 또는 대화형 로그인)
    - 캐시된 계정 목록 조회
    - 환경 레지스트리 조회/등록
    - 버전 정보 표시

명령어 구조:
    azctx --version                     # 버전 표시
    azctx login -a <계정> -t <테넌트>    # 컨텍스트 확보
    azctx accounts                      # 캐시된 계정 목록
    azctx env list                      # 알려진 환경 목록
    azctx env add <이름>                # Azure Stack 환경 등록

    예시:
    azctx login -a work -t contoso.onmicrosoft.com
    azctx login -a work -t contoso.onmicrosoft.com -s <구독 ID>
    azctx login -a stack -t <테넌트> -e AzureStackAdmin

Usage:
    # 명령줄에서 직접 실행
    $ azctx login -a work -t <테넌트>
    $ azctx --version

    # 모듈로 실행
    $ python -m cli.app
"""

import logging
from pathlib import Path

import click
from click import Context

from cli.i18n import t
from core.config import LogConfig

# Keep lightweight, centralized logging config
# 기본 WARNING 레벨로 INFO 로그가 사용자 출력에 섞이지 않도록 함 (LOG_LEVEL로 변경)
_log_config = LogConfig.from_env()
logging.basicConfig(
    level=_log_config.level,
    format=_log_config.format,
    datefmt=_log_config.date_format,
)


def get_version() -> str:
    """버전 문자열 반환

    version.txt 파일에서 버전을 읽어옴
    """
    from core.config import get_version as config_get_version

    return config_get_version()


VERSION = get_version()


def _build_help_text(lang: str = "ko") -> str:
    """help 텍스트 생성"""
    if lang == "en":
        lines = [
            "azctx - Azure context cache",
            "",
            t("cli.help_intro", lang="en"),
            "",
            "\b",  # Click keeps line breaks
            t("cli.help_basic_usage", lang="en"),
            f"  azctx login -a <account> -t <tenant>   {t('cli.help_login', lang='en')}",
            f"  azctx accounts                         {t('cli.help_accounts', lang='en')}",
            f"  azctx env list / add <name>            {t('cli.help_env', lang='en')}",
        ]
    else:
        lines = [
            "azctx - Azure 컨텍스트 캐시",
            "",
            "셸 세션마다 다시 로그인하지 않도록",
            "계정별 Azure 컨텍스트를 캐시하고 재사용하는 CLI 도구입니다.",
            "",
            "\b",  # Click 줄바꿈 유지 마커
            "[기본 사용법]",
            "  azctx login -a <계정> -t <테넌트>   컨텍스트 확보 (캐시 재사용 또는 로그인)",
            "  azctx accounts                      캐시된 계정 목록",
            "  azctx env list / add <이름>         환경 레지스트리",
        ]

    return "\n".join(lines)


@click.group()
@click.version_option(VERSION, prog_name="azctx")
@click.option(
    "--lang",
    type=click.Choice(["ko", "en"]),
    default="ko",
    help="UI 언어 설정 / UI language (ko: 한국어, en: English)",
)
@click.option("--debug", is_flag=True, help="디버그 로그 및 에러 traceback 출력")
@click.option("--no-directory", is_flag=True, help="보조 디렉토리 로그인 생략")
@click.pass_context
def cli(ctx: Context, lang: str, debug: bool, no_directory: bool) -> None:
    """azctx - Azure 컨텍스트 캐시"""
    # Set language for i18n
    from cli.i18n import set_lang

    set_lang(lang)

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    # Store options in click context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["lang"] = lang
    ctx.obj["debug"] = debug
    ctx.obj["no_directory"] = no_directory


# help 텍스트 동적 설정
cli.help = _build_help_text()


@cli.command("login")
@click.option(
    "-d",
    "--folder",
    "folder",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="캐시 폴더 (기본: AZCTX_CACHE_FOLDER 또는 ~/.azctx/contexts)",
)
@click.option("-a", "--account", "account", required=True, help="계정 이름 (캐시 파일명)")
@click.option("-t", "--tenant", "tenant", default=None, help="테넌트 ID 또는 도메인")
@click.option("-s", "--subscription", "subscription", default=None, help="구독 ID")
@click.option("-e", "--environment", "environment", default=None, help="환경 이름 (예: AzureStackAdmin)")
@click.pass_context
def login_cmd(
    ctx: Context,
    folder: Path | None,
    account: str,
    tenant: str | None,
    subscription: str | None,
    environment: str | None,
) -> None:
    """계정 컨텍스트 확보

    \b
    캐시된 컨텍스트가 유효하면 재사용하고, 아니면 대화형 로그인 후 저장합니다.

    \b
    Examples:
        azctx login -a work -t contoso.onmicrosoft.com
        azctx login -a work -t <테넌트> -s <구독 ID>
        azctx login -d ./contexts -a stack -t <테넌트> -e AzureStackAdmin
    """
    from cli.headless import LoginConfig, run_login

    config = LoginConfig(
        account_name=account,
        parent_folder=folder,
        tenant_id=tenant,
        subscription_id=subscription,
        environment_name=environment,
        directory=not ctx.obj.get("no_directory", False),
        debug=ctx.obj.get("debug", False),
    )
    raise SystemExit(run_login(config))


@cli.command("accounts")
@click.option(
    "-d",
    "--folder",
    "folder",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="캐시 폴더 (기본: AZCTX_CACHE_FOLDER 또는 ~/.azctx/contexts)",
)
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
def accounts_cmd(folder: Path | None, as_json: bool) -> None:
    """캐시된 계정 목록

    \b
    Examples:
        azctx accounts
        azctx accounts -d ./contexts --json
    """
    import json as json_module

    from cli.ui.console import console, print_table
    from core.auth.cache import list_records, read_record
    from core.auth.types import ConfigurationError
    from core.config import get_default_cache_folder

    folder = folder.expanduser() if folder else get_default_cache_folder()

    rows: list[dict[str, str]] = []
    for path in list_records(folder):
        try:
            record = read_record(path)
        except ConfigurationError:
            rows.append({"account": path.stem, "tenant": "", "subscription": "", "environment": t("cli.unreadable")})
            continue

        context = record.default_context if record else None
        if not context:
            continue
        if not isinstance(context, dict):
            rows.append({"account": path.stem, "tenant": "", "subscription": "", "environment": t("cli.unreadable")})
            continue
        rows.append(
            {
                "account": path.stem,
                "tenant": _context_field(context, "Tenant", "Id"),
                "subscription": _context_field(context, "Subscription", "Id"),
                "environment": _context_field(context, "Environment", "Name"),
            }
        )

    if as_json:
        click.echo(json_module.dumps(rows, ensure_ascii=False, indent=2))
        return

    if not rows:
        console.print(f"[dim]{t('cli.no_accounts', folder=str(folder))}[/dim]")
        return

    print_table(
        title=t("cli.accounts_title", folder=str(folder)),
        columns=[t("cli.col_account"), t("cli.col_tenant"), t("cli.col_subscription"), t("cli.col_environment")],
        rows=[[r["account"], r["tenant"], r["subscription"], r["environment"]] for r in rows],
    )


def _context_field(context: dict, section: str, key: str) -> str:
    """컨텍스트 하위 객체의 값 (객체가 아니거나 없으면 빈 문자열)"""
    value = context.get(section)
    if not isinstance(value, dict):
        return ""
    return str(value.get(key) or "")


# =============================================================================
# 환경 레지스트리 명령어
# =============================================================================


@cli.group("env")
def env_cmd():
    """환경 레지스트리 관리

    \b
    Examples:
        azctx env list                  # 알려진 환경 목록
        azctx env add AzureStackAdmin   # Azure Stack 관리자 환경 등록
    """
    pass


@env_cmd.command("list")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
def env_list(as_json: bool) -> None:
    """알려진 환경 목록"""
    import json as json_module

    from cli.ui.console import print_table
    from core.auth.environment import EnvironmentRegistry
    from core.config import get_config_dir

    environments = EnvironmentRegistry(get_config_dir()).environments()

    if as_json:
        click.echo(json_module.dumps([e.to_dict() for e in environments], ensure_ascii=False, indent=2))
        return

    print_table(
        title=t("cli.environments_title"),
        columns=[t("cli.col_name"), t("cli.col_kind"), t("cli.col_arm_url"), t("cli.col_vault_suffix")],
        rows=[[e.name, e.kind.value, e.resource_manager_url, e.key_vault_dns_suffix] for e in environments],
    )


@env_cmd.command("add")
@click.argument("name")
@click.option("--region", default=None, help="Azure Stack 리전 (기본: AZCTX_STACK_REGION 또는 local)")
@click.option("--fqdn", default=None, help="Azure Stack 외부 FQDN (기본: AZCTX_STACK_FQDN 또는 azurestack.external)")
@click.pass_context
def env_add(ctx: Context, name: str, region: str | None, fqdn: str | None) -> None:
    """Azure Stack 환경 등록

    이름에 'admin'이 포함되면 관리자 엔드포인트(adminmanagement.*)로,
    그 외에는 사용자 엔드포인트(management.*)로 등록합니다.
    """
    from rich.markup import escape

    from cli.ui.console import print_error, print_success
    from core.auth.environment import build_stack_environment
    from core.auth.provider import MsalBackend
    from core.auth.types import AuthError

    backend = MsalBackend()
    try:
        if name.lower() in {n.lower() for n in backend.list_known_environments()}:
            print_error(t("cli.env_exists", name=name))
            raise SystemExit(1)

        environment = build_stack_environment(name, region=region, fqdn=fqdn)
        try:
            backend.register_environment(environment)
        except AuthError as e:
            print_error(t("cli.env_add_failed", name=name, message=escape(str(e))))
            raise SystemExit(1) from e
    finally:
        backend.close()

    print_success(t("cli.env_added", name=environment.name, url=environment.resource_manager_url))


if __name__ == "__main__":
    cli()
