"""
cli/i18n/messages/cli_commands.py - CLI Command Messages

Contains translations for Click CLI commands, help text, and error messages.
"""

from __future__ import annotations

CLI_MESSAGES = {
    # =========================================================================
    # CLI Help Text
    # =========================================================================
    "help_intro": {
        "ko": "셸 세션마다 다시 로그인하지 않도록\n계정별 Azure 컨텍스트를 캐시하고 재사용하는 CLI 도구입니다.",
        "en": "A CLI tool that caches per-account Azure contexts\nso you do not have to sign in again in every shell session.",
    },
    "help_basic_usage": {
        "ko": "[기본 사용법]",
        "en": "[Basic Usage]",
    },
    "help_login": {
        "ko": "컨텍스트 확보 (캐시 재사용 또는 로그인)",
        "en": "Ensure a context (reuse cache or sign in)",
    },
    "help_accounts": {
        "ko": "캐시된 계정 목록",
        "en": "List cached accounts",
    },
    "help_env": {
        "ko": "환경 레지스트리",
        "en": "Environment registry",
    },
    # =========================================================================
    # login
    # =========================================================================
    "invalid_account_name": {
        "ko": "계정 이름을 파일명으로 사용할 수 없습니다: '{name}'",
        "en": "Account name cannot be used as a file name: '{name}'",
    },
    # =========================================================================
    # accounts
    # =========================================================================
    "accounts_title": {
        "ko": "캐시된 계정 ({folder})",
        "en": "Cached accounts ({folder})",
    },
    "no_accounts": {
        "ko": "캐시된 계정이 없습니다: {folder}",
        "en": "No cached accounts in {folder}",
    },
    "unreadable": {
        "ko": "(읽을 수 없음)",
        "en": "(unreadable)",
    },
    # =========================================================================
    # env
    # =========================================================================
    "environments_title": {
        "ko": "알려진 환경",
        "en": "Known environments",
    },
    "env_exists": {
        "ko": "이미 등록된 환경입니다: {name}",
        "en": "Environment already registered: {name}",
    },
    "env_added": {
        "ko": "환경 등록 완료: {name} ({url})",
        "en": "Environment registered: {name} ({url})",
    },
    "env_add_failed": {
        "ko": "환경 등록 실패: {name} - {message}",
        "en": "Failed to register environment: {name} - {message}",
    },
    # =========================================================================
    # Table Columns
    # =========================================================================
    "col_account": {
        "ko": "계정",
        "en": "Account",
    },
    "col_tenant": {
        "ko": "테넌트",
        "en": "Tenant",
    },
    "col_subscription": {
        "ko": "구독",
        "en": "Subscription",
    },
    "col_environment": {
        "ko": "환경",
        "en": "Environment",
    },
    "col_name": {
        "ko": "이름",
        "en": "Name",
    },
    "col_kind": {
        "ko": "종류",
        "en": "Kind",
    },
    "col_arm_url": {
        "ko": "ARM 엔드포인트",
        "en": "ARM Endpoint",
    },
    "col_vault_suffix": {
        "ko": "Key Vault 접미사",
        "en": "Key Vault Suffix",
    },
}
