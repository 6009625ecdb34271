"""
cli/i18n - azctx 출력 메시지 다국어 처리

한국어(ko)가 기본이며 --lang en으로 영어 출력을 선택합니다.
메시지는 cli/i18n/messages의 "namespace.key" 레지스트리에 등록되어 있고,
언어는 ContextVar에 한 번 설정되어 매니저/CLI 출력 전체에 적용됩니다.

Usage:
    from cli.i18n import set_lang, t

    set_lang("en")
    print(t("auth.first_login", account="work"))
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any

SUPPORTED_LANGS = ("ko", "en")
DEFAULT_LANG = "ko"

_current_lang: ContextVar[str] = ContextVar("azctx_lang", default=DEFAULT_LANG)


def get_lang() -> str:
    return _current_lang.get()


def set_lang(lang: str) -> None:
    """출력 언어 설정 (지원하지 않는 코드는 기본 언어로)"""
    _current_lang.set(lang if lang in SUPPORTED_LANGS else DEFAULT_LANG)


def t(key: str, lang: str | None = None, **kwargs: Any) -> str:
    """메시지 키를 현재 언어 문자열로 변환

    Args:
        key: "namespace.key" 형식의 메시지 키 (예: "auth.session_expired")
        lang: 언어 지정 (없으면 현재 설정 언어)
        **kwargs: 템플릿 치환 값 (account, domain 등)

    Returns:
        번역된 문자열. 등록되지 않은 키는 키 그대로 반환하고,
        치환 값이 모자라면 템플릿을 그대로 반환합니다.
    """
    from cli.i18n.messages import MESSAGES

    entry = MESSAGES.get(key)
    if entry is None:
        return key

    lang = lang if lang in SUPPORTED_LANGS else get_lang()
    text = entry.get(lang) or entry.get(DEFAULT_LANG, key)
    if not kwargs:
        return text

    try:
        return text.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return text


__all__ = [
    "t",
    "get_lang",
    "set_lang",
    "SUPPORTED_LANGS",
    "DEFAULT_LANG",
]
