# core/auth/config/loader.py
"""
백엔드 주변(ambient) 설정 파일 로더

{config_dir}/settings.json:
    {
        "ContextAutosave": "CurrentUser" | "Process"
    }

AZCTX_CONTEXT_AUTOSAVE 환경변수가 있으면 파일 값보다 우선합니다.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from core.config import get_config_dir, settings

from ..types import AutosaveMode, ConfigurationError

logger = logging.getLogger(__name__)

AUTOSAVE_ENV_VAR = "AZCTX_CONTEXT_AUTOSAVE"


@dataclass
class BackendConfig:
    """백엔드 설정

    Attributes:
        autosave: 컨텍스트 자동 저장 범위 (기본: CurrentUser)
        config_dir: 설정 디렉토리
    """

    config_dir: Path
    autosave: AutosaveMode = AutosaveMode.CURRENT_USER

    @property
    def settings_path(self) -> Path:
        return self.config_dir / settings.SETTINGS_FILE_NAME

    @property
    def default_context_path(self) -> Path:
        """CurrentUser 자동 저장 대상 파일"""
        return self.config_dir / settings.DEFAULT_CONTEXT_FILE_NAME


def parse_autosave_mode(value: str) -> AutosaveMode:
    """자동 저장 범위 문자열 해석 (대소문자 무시)

    Raises:
        ConfigurationError: 알 수 없는 값
    """
    for mode in AutosaveMode:
        if mode.value.lower() == value.strip().lower():
            return mode
    raise ConfigurationError(f"알 수 없는 자동 저장 범위: {value}", config_key="ContextAutosave")


def load_config(config_dir: Path | None = None) -> BackendConfig:
    """백엔드 설정 로드

    Args:
        config_dir: 설정 디렉토리 (기본: get_config_dir())

    Returns:
        BackendConfig

    Raises:
        ConfigurationError: 설정 파일을 해석할 수 없는 경우
    """
    config = BackendConfig(config_dir=Path(config_dir) if config_dir else get_config_dir())

    if config.settings_path.exists():
        try:
            with open(config.settings_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                "설정 파일을 읽을 수 없습니다", config_key=str(config.settings_path), cause=e
            ) from e

        if isinstance(data, dict) and data.get("ContextAutosave"):
            config.autosave = parse_autosave_mode(str(data["ContextAutosave"]))

    env_value = os.environ.get(AUTOSAVE_ENV_VAR)
    if env_value:
        config.autosave = parse_autosave_mode(env_value)

    logger.debug("백엔드 설정: autosave=%s, dir=%s", config.autosave, config.config_dir)
    return config

