"""
Tests for settings loading (YAML file + SANAD_* environment overrides)
"""
import logging

from sanad.common.config import Settings, load_settings


class TestLoadSettings:

    def test_missing_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.delenv("SANAD_TEMPLATE_PATH", raising=False)

        settings = load_settings(str(tmp_path / "absent.yaml"))

        assert settings.template_path == Settings().template_path
        assert settings.receipt_number_prefixes == ["REC", "PAY"]

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "template_path: /srv/voucher.pdf\n"
            "fetch_timeout: 3\n"
            "barcode_scale: 0.5\n"
            "public_verify_url: https://sanad.example.com/verify\n"
            "unknown_key: 1\n",
            encoding="utf-8",
        )

        settings = load_settings(str(path))

        assert settings.template_path == "/srv/voucher.pdf"
        assert settings.fetch_timeout == 3
        assert settings.barcode_scale == 0.5
        assert settings.public_verify_url == "https://sanad.example.com/verify"
        assert not hasattr(settings, "unknown_key")

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SANAD_FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("SANAD_RECEIPT_NUMBER_PREFIXES", "REC, PAY, INV")
        monkeypatch.setenv("SANAD_STORAGE_ROOT", "/data/receipts")

        settings = load_settings(str(tmp_path / "absent.yaml"))

        assert settings.fetch_timeout == 2.5
        assert settings.receipt_number_prefixes == ["REC", "PAY", "INV"]
        assert settings.storage_root == "/data/receipts"

    def test_config_path_from_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yaml"
        path.write_text("storage_root: /elsewhere\n", encoding="utf-8")
        monkeypatch.setenv("SANAD_CONFIG", str(path))

        assert load_settings().storage_root == "/elsewhere"


class TestSettingsProperties:

    def test_accepted_prefixes(self):
        assert Settings().accepted_prefixes == ["RCP", "REC", "PAY"]

    def test_log_level_value(self):
        assert Settings(log_level="debug").log_level_value == logging.DEBUG
        assert Settings(log_level="nonsense").log_level_value == logging.INFO
