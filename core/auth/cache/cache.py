# core/auth/cache/cache.py
"""
계정 컨텍스트 캐시 파일 관리 구현

- CacheRecord: 컨텍스트 파일 데이터 구조 (계정 하나의 Session 직렬화)
- CacheRecordManager: {parent_folder}/{account_name}.json 파일 관리
- 폴더 유틸리티: 빈 레코드 생성, 부산물 정리, 레코드 목록

설계 원칙:
- 계정 이름당 폴더마다 레코드는 하나 (마지막 로그인이 덮어씀)
- 저장은 임시 파일에 쓴 뒤 교체 (부분 기록 파일을 남기지 않음)
- 파일 형식: DefaultContextKey / EnvironmentTable / Contexts / ExtendedProperties
"""

from __future__ import annotations

import copy
import fnmatch
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from core.config import settings

from ..types import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_KEY = "Default"

# 폴더마다 한 번 기록하는 빈 레코드 템플릿
EMPTY_RECORD: dict[str, Any] = {
    "DefaultContextKey": DEFAULT_CONTEXT_KEY,
    "EnvironmentTable": {},
    "Contexts": {},
    "ExtendedProperties": {},
}


# =============================================================================
# Cache Record
# =============================================================================


@dataclass
class CacheRecord:
    """컨텍스트 파일 데이터 구조

    Attributes:
        contexts: {컨텍스트 키: 컨텍스트 dict}
        environment_table: {환경 이름: 환경 dict} (등록된 사용자 환경)
        default_context_key: 기본 컨텍스트 키
        extended_properties: 백엔드 확장 속성
    """

    contexts: dict[str, dict[str, Any]] = field(default_factory=dict)
    environment_table: dict[str, dict[str, Any]] = field(default_factory=dict)
    default_context_key: str = DEFAULT_CONTEXT_KEY
    extended_properties: dict[str, Any] = field(default_factory=dict)

    @property
    def default_context(self) -> dict[str, Any] | None:
        """기본 컨텍스트 (없으면 None)"""
        return self.contexts.get(self.default_context_key)

    def is_empty(self) -> bool:
        return not self.contexts

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (JSON 저장용)"""
        return {
            "DefaultContextKey": self.default_context_key,
            "EnvironmentTable": self.environment_table,
            "Contexts": self.contexts,
            "ExtendedProperties": self.extended_properties,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CacheRecord:
        """딕셔너리에서 생성 (JSON 로드용)"""
        return cls(
            contexts=dict(data.get("Contexts") or {}),
            environment_table=dict(data.get("EnvironmentTable") or {}),
            default_context_key=data.get("DefaultContextKey") or DEFAULT_CONTEXT_KEY,
            extended_properties=dict(data.get("ExtendedProperties") or {}),
        )

    @classmethod
    def empty(cls) -> CacheRecord:
        return cls.from_dict(copy.deepcopy(EMPTY_RECORD))


def read_record(path: Path) -> CacheRecord | None:
    """컨텍스트 파일 읽기

    Args:
        path: 컨텍스트 파일 경로

    Returns:
        CacheRecord 또는 None (파일이 없을 때)

    Raises:
        ConfigurationError: JSON 파싱 실패 또는 형식 오류
    """
    if not path.exists():
        return None

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError("컨텍스트 파일을 읽을 수 없습니다", config_key=str(path), cause=e) from e

    if not isinstance(data, dict):
        raise ConfigurationError("컨텍스트 파일 형식이 올바르지 않습니다", config_key=str(path))

    for key in ("Contexts", "EnvironmentTable", "ExtendedProperties"):
        if not isinstance(data.get(key) or {}, dict):
            raise ConfigurationError(f"{key} 항목이 객체가 아닙니다", config_key=str(path))
    if not isinstance(data.get("DefaultContextKey") or DEFAULT_CONTEXT_KEY, str):
        raise ConfigurationError("DefaultContextKey 항목이 문자열이 아닙니다", config_key=str(path))

    return CacheRecord.from_dict(data)


def write_record(path: Path, record: CacheRecord) -> None:
    """컨텍스트 파일 저장 (덮어쓰기)

    같은 디렉토리의 임시 파일에 쓴 뒤 교체합니다.
    실패하면 기존 파일은 그대로 남습니다.

    Raises:
        OSError: 파일 저장 실패 시
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(record.to_dict(), f, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class CacheRecordManager:
    """계정 컨텍스트 파일 관리자

    캐시 파일 위치: {parent_folder}/{account_name}.json
    """

    def __init__(self, parent_folder: str | Path, account_name: str):
        """CacheRecordManager 초기화

        Args:
            parent_folder: 캐시 폴더
            account_name: 계정 이름 (검증된 파일명)
        """
        self.parent_folder = Path(parent_folder)
        self.account_name = account_name

    @property
    def cache_path(self) -> Path:
        """캐시 파일 전체 경로"""
        return self.parent_folder / f"{self.account_name}{settings.CONTEXT_FILE_SUFFIX}"

    def exists(self) -> bool:
        """캐시 파일 존재 여부"""
        return self.cache_path.is_file()


# =============================================================================
# 폴더 유틸리티
# =============================================================================


def ensure_cache_folder(parent_folder: Path) -> Path:
    """캐시 폴더와 빈 레코드 파일을 준비

    폴더가 없으면 재귀적으로 생성하고, empty.json이 없으면 한 번 기록합니다.

    Returns:
        빈 레코드 파일 경로
    """
    parent_folder.mkdir(parents=True, exist_ok=True)

    empty_path = parent_folder / settings.EMPTY_RECORD_NAME
    if not empty_path.exists():
        write_record(empty_path, CacheRecord.empty())
        logger.debug("빈 레코드 생성: %s", empty_path)
    return empty_path


def cleanup_stray_artifacts(
    parent_folder: Path,
    patterns: Iterable[str],
    keep: Iterable[Path] = (),
) -> list[Path]:
    """백엔드가 남긴 부산물 파일 정리

    Args:
        parent_folder: 캐시 폴더
        patterns: 삭제할 파일명 glob 패턴
        keep: 패턴과 일치해도 지우지 않을 파일

    Returns:
        삭제된 파일 목록
    """
    patterns = list(patterns)
    if not patterns or not parent_folder.is_dir():
        return []

    protected = {Path(p).resolve() for p in keep}
    protected.add((parent_folder / settings.EMPTY_RECORD_NAME).resolve())

    removed = []
    for entry in parent_folder.iterdir():
        if not entry.is_file() or entry.resolve() in protected:
            continue
        if any(fnmatch.fnmatch(entry.name, pattern) for pattern in patterns):
            try:
                entry.unlink()
            except OSError as e:
                logger.warning("부산물 파일 삭제 실패: %s (%s)", entry, e)
                continue
            removed.append(entry)
            logger.debug("부산물 파일 삭제: %s", entry)
    return removed


def list_records(parent_folder: Path) -> list[Path]:
    """폴더의 계정 컨텍스트 파일 목록 (empty.json 제외, 이름순)"""
    if not parent_folder.is_dir():
        return []
    return sorted(
        p
        for p in parent_folder.glob(f"*{settings.CONTEXT_FILE_SUFFIX}")
        if p.is_file() and p.name != settings.EMPTY_RECORD_NAME
    )
