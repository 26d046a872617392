"""
Unit Tests for Engine Configuration
"""

import pytest

from credential.config import EngineConfig, LegacyScheme
from credential.errors import InvalidConfig
from credential.kdf import KdfType


class TestEngineConfig:
    """Test cases for EngineConfig."""

    def test_defaults(self):
        config = EngineConfig.default()
        assert config.key_length == 66
        assert config.work == 1
        assert config.hash_method == "pbkdf2"

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            EngineConfig().work = 2

    def test_from_wire_options(self):
        config = EngineConfig.from_options({"keyLength": 12, "work": 0.5, "hashMethod": "pbkdf2"})
        assert config == EngineConfig(key_length=12, work=0.5, hash_method="pbkdf2")

    def test_from_attribute_names(self):
        assert EngineConfig.from_options({"key_length": 12}).key_length == 12

    def test_none_options_keep_defaults(self):
        assert EngineConfig.from_options({"work": None, "keyLength": None}) == EngineConfig()
        assert EngineConfig.from_options(None) == EngineConfig()

    def test_merged_leaves_original_untouched(self):
        base = EngineConfig(work=2)
        merged = base.merged({"keyLength": 32})

        assert merged.key_length == 32
        assert merged.work == 2
        assert base.key_length == 66

    def test_enum_method_is_normalized(self):
        assert EngineConfig(hash_method=KdfType.PBKDF2).hash_method == "pbkdf2"

    def test_to_options(self):
        assert EngineConfig().to_options() == {"keyLength": 66, "work": 1.0, "hashMethod": "pbkdf2"}

    def test_unknown_option_rejected(self):
        with pytest.raises(InvalidConfig):
            EngineConfig.from_options({"workKey": 463})

    @pytest.mark.parametrize("kwargs", [
        {"key_length": 0},
        {"key_length": -66},
        {"key_length": 66.0},
        {"key_length": True},
        {"work": 0},
        {"work": -1},
        {"work": float("nan")},
        {"work": "1"},
        {"hash_method": ""},
        {"hash_method": None},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(InvalidConfig):
            EngineConfig(**kwargs)


class TestLegacyScheme:
    """Test cases for the retired work-key iteration scheme."""

    def test_default_iterations(self):
        assert LegacyScheme().iterations() == (1000 + 388) * 60

    def test_explicit_work_units(self):
        assert LegacyScheme(work_key=463).iterations(60) == 1463 * 60

    def test_from_env(self):
        assert LegacyScheme.from_env({"credential_key": "463"}).work_key == 463

    def test_from_env_default(self):
        assert LegacyScheme.from_env({}) == LegacyScheme()

    def test_from_env_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("credential_key", "500")
        assert LegacyScheme.from_env().work_key == 500

    def test_from_env_rejects_garbage(self):
        with pytest.raises(InvalidConfig):
            LegacyScheme.from_env({"credential_key": "secret"})

    def test_rejects_negative_values(self):
        with pytest.raises(InvalidConfig):
            LegacyScheme(work_key=-1)
