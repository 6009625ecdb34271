"""
cli/ui/console.py - Rich 콘솔 유틸리티

일관된 콘솔 출력을 위한 함수들
"""

import logging
import platform

from rich.console import Console
from rich.table import Table

# msal/urllib3 노이즈 로그 제한
logging.getLogger("msal.application").setLevel(logging.WARNING)
logging.getLogger("msal.token_cache").setLevel(logging.WARNING)
logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)


def get_console() -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        color_system="auto",
        highlight=False,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스
console = get_console()


# =============================================================================
# 표준 출력 스타일 (이모지 없이 Rich 스타일만 사용)
# =============================================================================

# 상태 심볼
SYMBOL_SUCCESS = "✓"  # 완료
SYMBOL_ERROR = "✗"  # 에러
SYMBOL_WARNING = "!"  # 경고
SYMBOL_INFO = "•"  # 정보


def print_success(message: str) -> None:
    """성공 메시지 출력 (초록색 체크마크)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[green]{SYMBOL_SUCCESS} {message}[/green]")


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[red]{SYMBOL_ERROR} {message}[/red]")


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 경고)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[yellow]{SYMBOL_WARNING} {message}[/yellow]")


def print_info(message: str) -> None:
    """정보 메시지 출력 (파란색 정보)

    Args:
        message: 출력할 메시지
    """
    console.print(f"[blue]{SYMBOL_INFO} {message}[/blue]")


def print_table(
    title: str,
    columns: list[str],
    rows: list[list],
) -> None:
    """테이블 형식으로 데이터를 출력합니다.

    Args:
        title: 테이블 제목
        columns: 컬럼 헤더 리스트
        rows: 행 데이터 리스트
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")

    for column in columns:
        table.add_column(column)

    for row in rows:
        table.add_row(*[str(cell) for cell in row])

    console.print(table)

