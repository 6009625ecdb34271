# tests/cli/test_console_helpers.py
"""
cli/ui/console 헬퍼 함수 단위 테스트

Rich utility functions: print_success, print_error, print_warning,
print_info, print_table.
"""

import importlib

import pytest

from cli.ui.console import SYMBOL_ERROR, SYMBOL_INFO, SYMBOL_SUCCESS, SYMBOL_WARNING

# cli.ui 패키지가 Console 객체를 같은 이름으로 내보내므로 모듈은 sys.modules에서 가져옴
console_module = importlib.import_module("cli.ui.console")


@pytest.fixture
def recorded(monkeypatch):
    """출력을 기록하는 콘솔로 교체"""
    from rich.console import Console

    recording = Console(record=True, width=200, highlight=False, color_system=None)
    monkeypatch.setattr(console_module, "console", recording)
    return recording


# =============================================================================
# 상태 메시지 테스트
# =============================================================================


class TestStatusMessages:
    """print_success / print_error / print_warning / print_info 테스트"""

    @pytest.mark.parametrize(
        "func_name,symbol",
        [
            ("print_success", SYMBOL_SUCCESS),
            ("print_error", SYMBOL_ERROR),
            ("print_warning", SYMBOL_WARNING),
            ("print_info", SYMBOL_INFO),
        ],
    )
    def test_symbol_prefix(self, recorded, func_name, symbol):
        """각 메시지 앞에 상태 심볼 출력"""
        getattr(console_module, func_name)("work: 완료")

        assert recorded.export_text().strip() == f"{symbol} work: 완료"

    def test_escaped_brackets_kept(self, recorded):
        """escape한 대괄호는 마크업으로 해석되지 않고 그대로 출력"""
        from rich.markup import escape

        console_module.print_error(escape("[msal] login: denied"))

        assert "[msal] login: denied" in recorded.export_text()


# =============================================================================
# print_table 테스트
# =============================================================================


class TestPrintTable:
    """print_table 테스트"""

    def test_basic_table(self, recorded):
        console_module.print_table(
            title="캐시된 계정",
            columns=["계정", "테넌트"],
            rows=[["work", "contoso.onmicrosoft.com"], ["lab", "fabrikam.com"]],
        )

        output = recorded.export_text()
        assert "캐시된 계정" in output
        assert "contoso.onmicrosoft.com" in output
        assert "fabrikam.com" in output

    def test_non_string_cells(self, recorded):
        """셀 값은 문자열로 변환"""
        console_module.print_table(title="t", columns=["a", "b"], rows=[[1, None]])

        output = recorded.export_text()
        assert "1" in output
        assert "None" in output

    def test_empty_rows(self, recorded):
        console_module.print_table(title="빈 테이블", columns=["a"], rows=[])
        assert "빈 테이블" in recorded.export_text()



# =============================================================================
# 패키지 재노출 테스트
# =============================================================================


class TestPackageExports:
    """cli.ui 패키지 재노출 테스트"""

    def test_console_object_shared(self):
        """패키지의 console은 헬퍼 모듈이 출력하는 Console 객체와 같음"""
        import cli.ui

        assert cli.ui.console is console_module.console

    def test_helpers_reexported(self):
        import cli.ui

        assert cli.ui.print_success is console_module.print_success
        assert cli.ui.SYMBOL_SUCCESS == SYMBOL_SUCCESS
