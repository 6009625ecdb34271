# core/auth/environment/environment.py
"""
Azure 환경(엔드포인트 집합) 정의 및 레지스트리

- BUILTIN_ENVIRONMENTS: 공용/국가별 클라우드
- detect_kind / build_stack_environment: Azure Stack 명명 규칙 기반 환경 생성
- EnvironmentRegistry: 등록된 환경을 {config_dir}/environments.json에 보관

Azure Stack 명명 규칙:
    ADMIN: https://adminmanagement.{region}.{fqdn}, adminvault.{region}.{fqdn}
    USER:  https://management.{region}.{fqdn},      vault.{region}.{fqdn}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.config import get_stack_fqdn, get_stack_region, settings

from ..types import ConfigurationError, Environment, EnvironmentKind, EnvironmentNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_LOGIN_ENDPOINT = "https://login.microsoftonline.com/"

BUILTIN_ENVIRONMENTS: dict[str, Environment] = {
    "AzureCloud": Environment(
        name="AzureCloud",
        resource_manager_url="https://management.azure.com/",
        active_directory_authority="https://login.microsoftonline.com/",
        management_audience="https://management.core.windows.net/",
        key_vault_dns_suffix="vault.azure.net",
        graph_url="https://graph.microsoft.com/",
    ),
    "AzureUSGovernment": Environment(
        name="AzureUSGovernment",
        resource_manager_url="https://management.usgovcloudapi.net/",
        active_directory_authority="https://login.microsoftonline.us/",
        management_audience="https://management.core.usgovcloudapi.net/",
        key_vault_dns_suffix="vault.usgovcloudapi.net",
        graph_url="https://graph.microsoft.us/",
    ),
    "AzureChinaCloud": Environment(
        name="AzureChinaCloud",
        resource_manager_url="https://management.chinacloudapi.cn/",
        active_directory_authority="https://login.chinacloudapi.cn/",
        management_audience="https://management.core.chinacloudapi.cn/",
        key_vault_dns_suffix="vault.azure.cn",
        graph_url="https://microsoftgraph.chinacloudapi.cn/",
    ),
}


def detect_kind(name: str) -> EnvironmentKind:
    """환경 이름으로 Azure Stack 엔드포인트 종류 판별

    이름에 'admin'이 들어가면 ADMIN, 그 외는 모두 USER입니다.
    """
    if "admin" in name.lower():
        return EnvironmentKind.ADMIN
    return EnvironmentKind.USER


def stack_endpoints(kind: EnvironmentKind, region: str | None = None, fqdn: str | None = None) -> tuple[str, str]:
    """Azure Stack 종류별 (ARM URL, Key Vault 접미사)

    Args:
        kind: ADMIN 또는 USER (그 외는 USER로 취급)
        region: 스택 리전 (기본: 설정값)
        fqdn: 외부 FQDN (기본: 설정값)
    """
    region = region or get_stack_region()
    fqdn = fqdn or get_stack_fqdn()

    if kind == EnvironmentKind.ADMIN:
        return f"https://adminmanagement.{region}.{fqdn}/", f"adminvault.{region}.{fqdn}"
    return f"https://management.{region}.{fqdn}/", f"vault.{region}.{fqdn}"


def build_stack_environment(
    name: str,
    metadata: dict[str, Any] | None = None,
    region: str | None = None,
    fqdn: str | None = None,
) -> Environment:
    """Azure Stack 환경 생성

    Args:
        name: 환경 이름
        metadata: ARM 메타데이터 엔드포인트 응답 (없으면 기본 로그인 엔드포인트 사용)
        region: 스택 리전
        fqdn: 외부 FQDN

    Returns:
        Environment
    """
    kind = detect_kind(name)
    arm_url, vault_suffix = stack_endpoints(kind, region, fqdn)

    metadata = metadata or {}
    authentication = metadata.get("authentication") or {}
    login_endpoint = authentication.get("loginEndpoint") or DEFAULT_LOGIN_ENDPOINT
    audiences = authentication.get("audiences") or []
    audience = audiences[0] if audiences else arm_url

    return Environment(
        name=name,
        resource_manager_url=arm_url,
        active_directory_authority=login_endpoint,
        management_audience=audience,
        key_vault_dns_suffix=vault_suffix,
        graph_url=metadata.get("graphEndpoint"),
        kind=kind,
    )


# =============================================================================
# Environment Registry
# =============================================================================


class EnvironmentRegistry:
    """내장 + 등록된 환경 레지스트리

    이름 조회는 대소문자를 구분하지 않습니다.
    등록된 환경은 파일에 저장되어 프로세스가 끝나도 유지됩니다.
    """

    def __init__(self, config_dir: Path):
        """EnvironmentRegistry 초기화

        Args:
            config_dir: 설정 디렉토리 ({config_dir}/environments.json)
        """
        self.path = Path(config_dir) / settings.ENVIRONMENTS_FILE_NAME
        self._registered: dict[str, Environment] = self._load()

    def _load(self) -> dict[str, Environment]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            return {name: Environment.from_dict(env) for name, env in data.items()}
        except (OSError, ValueError, KeyError) as e:
            raise ConfigurationError("환경 레지스트리를 읽을 수 없습니다", config_key=str(self.path), cause=e) from e

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump({name: env.to_dict() for name, env in self._registered.items()}, f, indent=2)

    def _all(self) -> dict[str, Environment]:
        return {**BUILTIN_ENVIRONMENTS, **self._registered}

    def names(self) -> set[str]:
        """알려진 환경 이름 집합"""
        return set(self._all())

    def find(self, name: str) -> Environment | None:
        """환경 조회 (없으면 None)"""
        lowered = name.lower()
        for env_name, env in self._all().items():
            if env_name.lower() == lowered:
                return env
        return None

    def get(self, name: str) -> Environment:
        """환경 조회

        Raises:
            EnvironmentNotFoundError: 알 수 없는 이름
        """
        env = self.find(name)
        if env is None:
            raise EnvironmentNotFoundError(name)
        return env

    def contains(self, name: str) -> bool:
        return self.find(name) is not None

    def register(self, environment: Environment) -> None:
        """환경 등록 (같은 이름이면 덮어씀)"""
        if environment.name in BUILTIN_ENVIRONMENTS:
            raise ConfigurationError(f"내장 환경은 덮어쓸 수 없습니다: {environment.name}")

        self._registered[environment.name] = environment
        self._save()
        logger.info("환경 등록: %s (%s)", environment.name, environment.resource_manager_url)

    def environments(self) -> list[Environment]:
        """모든 환경 (내장 먼저, 등록 순)"""
        return list(self._all().values())
