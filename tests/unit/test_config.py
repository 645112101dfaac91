"""Unit tests for GaslessConfig."""

from dataclasses import replace

import pytest

from gasless_sdk.core.config import GaslessConfig
from gasless_sdk.core.exceptions import ConfigurationMissingError
from tests import TEST_ADDRESSES


@pytest.fixture
def config():
    return GaslessConfig.sepolia(
        bundler_url="https://bundler.example.org",
        counter_address=TEST_ADDRESSES['counter'],
        sponsor_policy_id="sp_test"
    )


class TestGaslessConfig:
    """Test configuration loading and validation."""

    def test_sepolia_preset(self, config):
        assert config.chain_id == 11155111
        assert config.token_address == TEST_ADDRESSES['token']
        assert config.delegate_contract == TEST_ADDRESSES['delegate']
        assert config.token_decimals == 6
        assert config.serialize_per_sender

    def test_valid_config_passes(self, config):
        config.validate()

    def test_missing_policy_reported_first(self, config):
        broken = replace(config, sponsor_policy_id=None, bundler_url="")
        with pytest.raises(ConfigurationMissingError) as exc_info:
            broken.validate()
        assert exc_info.value.setting == 'sponsor_policy_id'
        assert not exc_info.value.retryable

    @pytest.mark.parametrize("setting", [
        'rpc_url', 'bundler_url', 'token_address', 'counter_address', 'delegate_contract'
    ])
    def test_each_required_setting(self, config, setting):
        with pytest.raises(ConfigurationMissingError) as exc_info:
            replace(config, **{setting: "  "}).validate()
        assert exc_info.value.setting == setting

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('GASLESS_BUNDLER_URL', 'https://bundler.example.org')
        monkeypatch.setenv('GASLESS_COUNTER_ADDRESS', TEST_ADDRESSES['counter'])
        monkeypatch.setenv('GASLESS_SPONSOR_POLICY_ID', 'sp_env')
        monkeypatch.setenv('GASLESS_MAX_RETRIES', '4')
        monkeypatch.setenv('GASLESS_SERIALIZE_PER_SENDER', 'false')

        config = GaslessConfig.from_env()

        assert config.bundler_url == 'https://bundler.example.org'
        assert config.sponsor_policy_id == 'sp_env'
        assert config.max_retries == 4
        assert not config.serialize_per_sender
        config.validate()

    def test_from_env_without_policy(self, monkeypatch):
        monkeypatch.delenv('GASLESS_SPONSOR_POLICY_ID', raising=False)
        monkeypatch.setenv('GASLESS_SPONSOR_POLICY_ID', '')
        assert GaslessConfig.from_env().sponsor_policy_id is None
