"""
cli/headless.py - 로그인 Runner

`azctx login` 명령의 실행부입니다. 셸 초기화 스크립트에서 호출하는 용도로,
캐시가 유효하면 프롬프트 없이 끝나고 만료되었을 때만 브라우저 로그인을 띄웁니다.

Usage:
    # 기본 캐시 폴더 (~/.azctx/contexts)
    azctx login -a work -t contoso.onmicrosoft.com

    # 구독 지정 (캐시 세션의 구독과 다르면 전환 후 저장)
    azctx login -a work -t contoso.onmicrosoft.com -s 00000000-0000-0000-0000-000000000000

    # Azure Stack 환경 (처음 보는 이름이면 자동 등록)
    azctx login -d ./contexts -a stack -t <테넌트> -e AzureStackAdmin

옵션:
    -d, --folder: 캐시 폴더
    -a, --account: 계정 이름 (캐시 파일명)
    -t, --tenant: 테넌트 ID 또는 도메인
    -s, --subscription: 구독 ID (선택)
    -e, --environment: 환경 이름 (선택)

종료 코드:
    0: 성공 (캐시 재사용 또는 로그인 후 저장)
    1: 실패
    130: 사용자 중단 (Ctrl+C)
"""

from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from cli.i18n import t
from cli.ui.console import console, print_error
from core.auth import AccountProfile, create_manager
from core.config import get_default_cache_folder
from core.exceptions import AzctxError, ValidationError, format_error_for_user


@dataclass
class LoginConfig:
    """로그인 실행 설정"""

    # 계정
    account_name: str
    parent_folder: Path | None = None

    # 로그인 옵션
    tenant_id: str | None = None
    subscription_id: str | None = None
    environment_name: str | None = None

    # 동작
    directory: bool = True
    debug: bool = False


class LoginRunner:
    """로그인 Runner

    매니저 생성부터 결과 보고까지 한 번의 ensure를 수행합니다.
    """

    def __init__(self, config: LoginConfig):
        self.config = config

    def run(self) -> int:
        """로그인 실행

        Returns:
            0: 성공
            1: 실패
            130: 사용자 중단
        """
        try:
            # 1. 프로파일 구성 (계정 이름 검증 포함)
            profile = self._build_profile()

            # 2. 매니저 구성 (디렉토리 기능은 여기서 한 번 결정)
            manager = create_manager(directory_enabled=False if not self.config.directory else None)

            # 3. 실행
            try:
                result = manager.ensure(profile)
            finally:
                manager.backend.close()

            if not result.success:
                return 1
            return 0

        except KeyboardInterrupt:
            console.print(f"\n[dim]{t('common.cancelled')}[/dim]")
            return 130
        except ValidationError as e:
            print_error(t("cli.invalid_account_name", name=escape(str(e.value))))
            return 1
        except AzctxError as e:
            print_error(escape(format_error_for_user(e)))
            self._print_traceback()
            return 1
        except Exception as e:
            print_error(t("common.error_label", message=escape(str(e))))
            self._print_traceback()
            return 1

    def _build_profile(self) -> AccountProfile:
        parent_folder = self.config.parent_folder or get_default_cache_folder()
        return AccountProfile(
            parent_folder=parent_folder,
            account_name=self.config.account_name,
            tenant_id=self.config.tenant_id,
            subscription_id=self.config.subscription_id,
            environment_name=self.config.environment_name,
        )

    def _print_traceback(self) -> None:
        if self.config.debug:
            import traceback

            traceback.print_exc()


def run_login(config: LoginConfig) -> int:
    """로그인 실행 편의 함수

    Returns:
        0: 성공, 1: 실패, 130: 사용자 중단
    """
    return LoginRunner(config).run()
