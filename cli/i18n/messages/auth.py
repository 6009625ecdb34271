"""
cli/i18n/messages/auth.py - Context Cache Messages

Contains translations for the account context cache (login, reuse, directory sign-in).
"""

from __future__ import annotations

AUTH_MESSAGES = {
    # =========================================================================
    # Cache Status
    # =========================================================================
    "first_login": {
        "ko": "{account}: 캐시된 컨텍스트가 없습니다. 첫 로그인을 진행합니다.",
        "en": "{account}: No cached context found. Starting first login.",
    },
    "cached_session_valid": {
        "ko": "{account}: 캐시된 세션이 유효합니다.",
        "en": "{account}: Cached session is still valid.",
    },
    "session_expired": {
        "ko": "{account}: 세션이 만료되었습니다. 다시 인증합니다.",
        "en": "{account}: Session expired. Re-authenticating.",
    },
    "cache_unreadable": {
        "ko": "캐시 파일을 읽을 수 없습니다: {path}",
        "en": "Cannot read cache file: {path}",
    },
    "subscription_switched": {
        "ko": "구독 전환: {subscription}",
        "en": "Switched subscription: {subscription}",
    },
    "environment_registered": {
        "ko": "환경 등록: {name} ({url})",
        "en": "Registered environment: {name} ({url})",
    },
    # =========================================================================
    # Login
    # =========================================================================
    "login_success": {
        "ko": "{account}: 로그인 성공: {user}",
        "en": "{account}: Logged in as {user}",
    },
    "login_failed": {
        "ko": "{account}: 로그인에 실패했습니다.",
        "en": "{account}: Login failed.",
    },
    "save_failed": {
        "ko": "{account}: 컨텍스트를 저장하지 못했습니다: {path}",
        "en": "{account}: Failed to save context: {path}",
    },
    # =========================================================================
    # Directory
    # =========================================================================
    "directory_success": {
        "ko": "디렉토리 로그인 성공: {domain}",
        "en": "Directory login succeeded: {domain}",
    },
    "directory_failed": {
        "ko": "디렉토리 로그인 실패: {domain}",
        "en": "Directory login failed: {domain}",
    },
}
