"""
cli/i18n/messages/common.py - Common Messages

Contains translations shared across commands.
"""

from __future__ import annotations

COMMON_MESSAGES = {
    "cancelled": {
        "ko": "취소되었습니다.",
        "en": "Cancelled.",
    },
    "error_label": {
        "ko": "오류: {message}",
        "en": "Error: {message}",
    },
}
