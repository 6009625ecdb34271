"""
core/config.py - 애플리케이션 전역 설정

하드코딩된 상수와 환경변수 기반 설정을 한 곳에서 관리합니다.

포함 항목:
    - Settings: 불변 설정 데이터클래스 (전역 인스턴스: settings)
    - 환경변수 헬퍼: get_env_bool, get_env_int
    - 경로 헬퍼: get_project_root, get_config_dir, get_default_cache_folder
    - LogConfig: 로깅 설정
    - get_version: version.txt 기반 버전 조회

환경변수:
    AZCTX_HOME: 설정 디렉토리 (기본: ~/.azctx)
    AZCTX_CACHE_FOLDER: 계정 컨텍스트 캐시 폴더 (기본: {AZCTX_HOME}/contexts)
    AZCTX_API_TIMEOUT: ARM/Graph HTTP 타임아웃 (초)
    AZCTX_STACK_REGION / AZCTX_STACK_FQDN: Azure Stack 엔드포인트 규칙
    AZCTX_DIRECTORY: 보조 디렉토리 로그인 사용 여부
    LOG_LEVEL / LOG_FORMAT: 로깅 설정
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """전역 설정 (불변)

    런타임에 변경되면 안 되는 기본값들입니다.
    환경변수로 덮어쓸 수 있는 값은 헬퍼 함수를 통해 조회합니다.
    """

    # Azure CLI 공개 클라이언트 ID (앱 등록 없이 사용 가능)
    CLIENT_ID: str = "04b07795-8ddb-461a-bbee-02f9e1bf7b46"
    DEFAULT_ENVIRONMENT: str = "AzureCloud"

    # ARM API
    ARM_API_VERSION: str = "2020-01-01"
    ARM_METADATA_API_VERSION: str = "2015-01-01"
    API_TIMEOUT: int = 30

    # 캐시 파일
    CONTEXT_FILE_SUFFIX: str = ".json"
    EMPTY_RECORD_NAME: str = "empty.json"
    SETTINGS_FILE_NAME: str = "settings.json"
    ENVIRONMENTS_FILE_NAME: str = "environments.json"
    DEFAULT_CONTEXT_FILE_NAME: str = "default_context.json"

    # Azure Stack 엔드포인트 명명 규칙: https://management.{region}.{fqdn}
    STACK_REGION: str = "local"
    STACK_FQDN: str = "azurestack.external"

    # 보조 디렉토리 로그인을 지원하지 않는 플랫폼 (platform.system() 값)
    DIRECTORY_UNSUPPORTED_PLATFORMS: tuple[str, ...] = field(default=("Darwin", "Linux"))


settings = Settings()


# =============================================================================
# 환경변수 헬퍼
# =============================================================================


def get_env_bool(name: str, default: bool = False) -> bool:
    """환경변수를 bool로 변환

    Args:
        name: 환경변수 이름
        default: 값이 없거나 해석할 수 없을 때 기본값

    Returns:
        변환된 bool 값
    """
    value = os.environ.get(name)
    if value is None:
        return default

    value = value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def get_env_int(name: str, default: int) -> int:
    """환경변수를 int로 변환 (실패 시 기본값)"""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_api_timeout() -> int:
    """HTTP 타임아웃 (초)"""
    return get_env_int("AZCTX_API_TIMEOUT", settings.API_TIMEOUT)


def get_stack_region() -> str:
    return os.environ.get("AZCTX_STACK_REGION") or settings.STACK_REGION


def get_stack_fqdn() -> str:
    return os.environ.get("AZCTX_STACK_FQDN") or settings.STACK_FQDN


def is_directory_enabled() -> bool:
    """보조 디렉토리 로그인 사용 여부 (기본: 사용)"""
    return get_env_bool("AZCTX_DIRECTORY", default=True)


# =============================================================================
# 경로 헬퍼
# =============================================================================


def get_project_root() -> Path:
    """프로젝트 루트 경로 (core/config.py 기준 상위 디렉토리)"""
    return Path(__file__).resolve().parent.parent


def get_config_dir() -> Path:
    """설정 디렉토리 경로

    AZCTX_HOME 환경변수가 있으면 사용하고, 없으면 ~/.azctx를 사용합니다.
    디렉토리는 생성하지 않습니다.
    """
    home = os.environ.get("AZCTX_HOME")
    if home:
        return Path(home).expanduser()
    return Path.home() / ".azctx"


def get_default_cache_folder() -> Path:
    """계정별 컨텍스트 파일을 저장할 기본 폴더"""
    folder = os.environ.get("AZCTX_CACHE_FOLDER")
    if folder:
        return Path(folder).expanduser()
    return get_config_dir() / "contexts"


# =============================================================================
# 로깅 설정
# =============================================================================


@dataclass
class LogConfig:
    """로깅 설정"""

    level: str = "WARNING"
    format: str = "%(asctime)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @classmethod
    def from_env(cls) -> LogConfig:
        """LOG_LEVEL, LOG_FORMAT 환경변수에서 로드"""
        default = cls()
        return cls(
            level=os.environ.get("LOG_LEVEL", default.level).upper(),
            format=os.environ.get("LOG_FORMAT", default.format),
            date_format=default.date_format,
        )


# =============================================================================
# 버전
# =============================================================================


@lru_cache(maxsize=1)
def get_version() -> str:
    """version.txt에서 버전 문자열을 읽어 반환

    파일이 없으면 "0.0.0"을 반환합니다.
    """
    version_file = get_project_root() / "version.txt"
    try:
        version = version_file.read_text(encoding="utf-8").strip()
    except OSError:
        return "0.0.0"
    return version or "0.0.0"
