# cli/ui - 콘솔 출력 컴포넌트 (rich)
"""
콘솔 출력 모듈

CLI 전용 UI 컴포넌트들 (상태 메시지, 테이블 등)
"""

# Direct imports (rich is commonly used, no lazy import needed)
from .console import (
    SYMBOL_ERROR,
    SYMBOL_INFO,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    console,
    get_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
)

__all__: list[str] = [
    "console",
    "get_console",
    "SYMBOL_SUCCESS",
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    "SYMBOL_INFO",
    "print_success",
    "print_error",
    "print_warning",
    "print_info",
    "print_table",
]
