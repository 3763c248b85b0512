"""
core/config/loader.py 테스트

settings.yaml 로드, 검증, Settings 싱글턴 테스트
"""

from pathlib import Path

import pytest

from core.config.loader import (
    AppConfig,
    LedgerConfig,
    Settings,
    SettingsLoadError,
    get_settings,
    load_settings,
)
from core.constants import Defaults, Paths, PROJECT_ROOT


def write_settings(temp_dir: Path, content: str) -> Path:
    path = temp_dir / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLedgerConfig:
    """LedgerConfig 데이터클래스 테스트"""

    def test_defaults(self) -> None:
        config = LedgerConfig()

        assert config.timezone == Defaults.TIMEZONE
        assert config.delete_clamps_balance is False
        assert config.chain_max_passes == Defaults.CHAIN_MAX_PASSES

    def test_frozen(self) -> None:
        """불변성 확인"""
        config = LedgerConfig()

        with pytest.raises(AttributeError):
            config.timezone = "UTC"  # type: ignore


class TestLoadSettings:
    """load_settings 테스트"""

    def test_load_valid(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """정상 로드"""
        config = load_settings(temp_settings_file)

        assert isinstance(config, AppConfig)
        assert config.database.path == temp_dir / "stock_test.db"
        assert config.ledger.chain_max_passes == 10
        assert config.web.port == 8123

    def test_defaults_for_missing_sections(self, temp_dir: Path) -> None:
        """섹션 생략 시 기본값"""
        path = write_settings(temp_dir, "web:\n  port: 9000\n")

        config = load_settings(path)

        assert config.database.path == Paths.DEFAULT_DB
        assert config.ledger == LedgerConfig()
        assert config.web.port == 9000

    def test_relative_db_path(self, temp_dir: Path) -> None:
        """상대 경로는 프로젝트 루트 기준"""
        path = write_settings(temp_dir, "database:\n  path: data/x.db\n")

        config = load_settings(path)

        assert config.database.path == PROJECT_ROOT / "data" / "x.db"

    def test_file_not_found(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError, match="찾을 수 없습니다"):
            load_settings(temp_dir / "missing.yaml")

    def test_empty_file(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError, match="비어 있습니다"):
            load_settings(write_settings(temp_dir, ""))

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError, match="파싱 실패"):
            load_settings(write_settings(temp_dir, "ledger: [unclosed\n"))

    def test_top_level_not_mapping(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "- a\n- b\n"))

    def test_unknown_timezone(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "ledger:\n  timezone: Nowhere/City\n"))

    def test_invalid_delete_clamps(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "ledger:\n  delete_clamps_balance: maybe\n"))

    def test_invalid_chain_max_passes(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "ledger:\n  chain_max_passes: 0\n"))

    def test_invalid_port(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "web:\n  port: 70000\n"))

    def test_section_not_mapping(self, temp_dir: Path) -> None:
        with pytest.raises(SettingsLoadError):
            load_settings(write_settings(temp_dir, "ledger: 3\n"))


class TestSettings:
    """Settings 싱글턴 테스트"""

    def test_singleton(self, temp_settings_file: Path) -> None:
        """같은 인스턴스 반환"""
        first = get_settings(temp_settings_file)
        second = get_settings()

        assert first is second
        assert second.web.port == 8123

    def test_reset(self, temp_settings_file: Path, temp_dir: Path) -> None:
        """reset 후 다시 로드"""
        get_settings(temp_settings_file)
        Settings.reset()

        other = write_settings(temp_dir, "web:\n  port: 8555\n")
        settings = get_settings(other)

        assert settings.web.port == 8555

    def test_properties(self, temp_settings_file: Path, temp_dir: Path) -> None:
        settings = get_settings(temp_settings_file)

        assert settings.db_path == temp_dir / "stock_test.db"
        assert settings.ledger.timezone == "Asia/Kolkata"
        assert settings.web.host == "127.0.0.1"
