"""
설정 로더

settings.yaml 로드 및 DB / 원장 / Web 설정 생성
"""

from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT
from core.utils.timezone import get_zone


@dataclass(frozen=True)
class DatabaseConfig:
    """DB 설정"""

    path: Path = Paths.DEFAULT_DB


@dataclass(frozen=True)
class LedgerConfig:
    """재고 원장 설정

    불변 데이터 구조로 설정 변경 방지
    """

    timezone: str = Defaults.TIMEZONE
    delete_clamps_balance: bool = Defaults.DELETE_CLAMPS_BALANCE
    chain_max_passes: int = Defaults.CHAIN_MAX_PASSES

    @property
    def zone(self) -> tzinfo:
        return get_zone(self.timezone)


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str = Defaults.WEB_HOST
    port: int = Defaults.WEB_PORT


@dataclass(frozen=True)
class AppConfig:
    """전체 설정 (settings.yaml에서 로드)"""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    web: WebConfig = field(default_factory=WebConfig)


class SettingsLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return value


def _parse_database(data: dict[str, Any]) -> DatabaseConfig:
    raw_path = data.get("path")
    if raw_path is None:
        return DatabaseConfig()

    path = Path(raw_path)
    if not path.is_absolute() and str(raw_path) != ":memory:":
        path = PROJECT_ROOT / path
    return DatabaseConfig(path=path)


def _parse_ledger(data: dict[str, Any]) -> LedgerConfig:
    timezone_name = data.get("timezone", Defaults.TIMEZONE)
    try:
        get_zone(timezone_name)
    except ValueError as e:
        raise SettingsLoadError(str(e)) from e

    delete_clamps = data.get("delete_clamps_balance", Defaults.DELETE_CLAMPS_BALANCE)
    if not isinstance(delete_clamps, bool):
        raise SettingsLoadError(
            f"ledger.delete_clamps_balance는 true/false여야 합니다: {delete_clamps!r}"
        )

    max_passes = data.get("chain_max_passes", Defaults.CHAIN_MAX_PASSES)
    if not isinstance(max_passes, int) or isinstance(max_passes, bool) or max_passes < 1:
        raise SettingsLoadError(
            f"ledger.chain_max_passes는 1 이상의 정수여야 합니다: {max_passes!r}"
        )

    return LedgerConfig(
        timezone=timezone_name,
        delete_clamps_balance=delete_clamps,
        chain_max_passes=max_passes,
    )


def _parse_web(data: dict[str, Any]) -> WebConfig:
    port = data.get("port", Defaults.WEB_PORT)
    if not isinstance(port, int) or not 0 < port < 65536:
        raise SettingsLoadError(f"web.port가 유효하지 않습니다: {port!r}")
    return WebConfig(host=str(data.get("host", Defaults.WEB_HOST)), port=port)


def load_settings(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    return AppConfig(
        database=_parse_database(_section(data, "database")),
        ledger=_parse_ledger(_section(data, "ledger")),
        web=_parse_web(_section(data, "web")),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_settings(settings_path)

    @property
    def db_path(self) -> Path:
        """DB 파일 경로"""
        assert self._config is not None
        return self._config.database.path

    @property
    def ledger(self) -> LedgerConfig:
        """원장 설정"""
        assert self._config is not None
        return self._config.ledger

    @property
    def web(self) -> WebConfig:
        """Web 서버 설정"""
        assert self._config is not None
        return self._config.web

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
