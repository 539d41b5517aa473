"""Tests for configuration loading"""

from dataclasses import fields

import pytest

from iceaxe.config import ENV_PREFIX, ONE_MB, IceAxeConfig, load_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for f in fields(IceAxeConfig):
        monkeypatch.delenv(ENV_PREFIX + f.name.upper(), raising=False)


class TestConfig:
    """YAML, environment and overrides"""

    def test_defaults(self):
        config = load_config()
        assert config.chunk_size == ONE_MB
        assert config.account_id == '-'
        assert config.retrieval_tier == 'Bulk'
        assert config == IceAxeConfig()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'iceaxe.yaml'
        path.write_text("region: ca-central-1\nchunk_size: 2097152\nunknown_key: 1\n")

        config = load_config(path)

        assert config.region == 'ca-central-1'
        assert config.chunk_size == 2 * ONE_MB

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / 'iceaxe.yaml'
        path.write_text("region: ca-central-1\n")
        monkeypatch.setenv('ICEAXE_REGION', 'eu-west-1')
        monkeypatch.setenv('ICEAXE_MAX_ATTEMPTS', '5')
        monkeypatch.setenv('ICEAXE_STRICT_CHUNK_SIZE', 'true')

        config = load_config(path)

        assert config.region == 'eu-west-1'
        assert config.max_attempts == 5
        assert config.strict_chunk_size is True

    def test_merged_skips_none(self):
        config = IceAxeConfig(region='ca-central-1').merged({'region': None, 'chunk_size': 8})
        assert config.region == 'ca-central-1'
        assert config.chunk_size == 8

    def test_invalid_mapping(self, tmp_path):
        path = tmp_path / 'iceaxe.yaml'
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize("chunk_size", [ONE_MB, 4 * ONE_MB, 4096 * ONE_MB])
    def test_strict_chunk_size_accepted(self, chunk_size):
        IceAxeConfig(chunk_size=chunk_size, strict_chunk_size=True).validate()

    @pytest.mark.parametrize("chunk_size", [1000, 3 * ONE_MB, 8192 * ONE_MB])
    def test_strict_chunk_size_rejected(self, chunk_size):
        with pytest.raises(ValueError):
            IceAxeConfig(chunk_size=chunk_size, strict_chunk_size=True).validate()

    def test_invalid_values(self):
        with pytest.raises(ValueError):
            IceAxeConfig(chunk_size=0).validate()
        with pytest.raises(ValueError):
            IceAxeConfig(retrieval_tier='Fast').validate()
