"""Tests for configuration management."""

import json
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from gene_analysis.config import (
    APIConfig, Config, GatewayConfig, create_example_config, get_default_config_path
)


class TestConfig:
    """Test cases for configuration management."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_default_config(self):
        config = Config.default()

        assert config.api.email == ""
        assert config.api.retry_attempts == 3
        assert config.api.retry_delay_ms == 1000
        assert config.api.alphafold_model_version == "v4"
        assert config.limits.max_aliases == 10
        assert config.limits.max_linked_sequences == 5
        assert config.relay.credential_host == "ncbi.nlm.nih.gov"
        assert config.output.formats == ['fasta', 'csv', 'txt']
        assert config.active_gateways == []

    def test_ncbi_rate_limit_depends_on_key(self):
        assert APIConfig().ncbi_rate_limit == 3.0
        assert APIConfig(ncbi_api_key='k').ncbi_rate_limit == 10.0

    def test_round_trip(self, temp_dir):
        config = Config.default()
        config.api.email = "me@example.org"
        config.gateways.urls = ["http://relay/?url={url}"]
        config.limits.max_aliases = 4
        config_file = temp_dir / "nested" / "config.json"

        config.to_file(config_file)
        loaded = Config.from_file(config_file)

        assert loaded.api.email == "me@example.org"
        assert loaded.gateways.urls == ["http://relay/?url={url}"]
        assert loaded.limits.max_aliases == 4

    def test_partial_file_uses_defaults(self, temp_dir):
        config_file = temp_dir / "config.json"
        config_file.write_text(json.dumps({'api': {'retry_attempts': 5}}))

        config = Config.from_file(config_file)

        assert config.api.retry_attempts == 5
        assert config.api.timeout_seconds == 30
        assert config.relay.port == 5050

    def test_missing_file_gives_defaults(self, temp_dir):
        config = Config.from_file(temp_dir / "absent.json")
        assert config.api.retry_attempts == 3

    def test_merge_env_vars(self):
        env = {
            'NCBI_API_KEY': 'env_key',
            'EMAIL': 'env@example.org',
            'GENE_ANALYSIS_GATEWAYS': 'http://a/?url={url}, http://b/',
            'GENE_ANALYSIS_RETRY_DELAY_MS': '250',
            'GENE_ANALYSIS_OUTPUT_DIR': '/tmp/out',
        }
        with patch.dict(os.environ, env):
            config = Config.default()
            config.merge_env_vars()

        assert config.api.ncbi_api_key == 'env_key'
        assert config.api.email == 'env@example.org'
        assert config.api.retry_delay_ms == 250
        assert config.gateways.urls == ['http://a/?url={url}', 'http://b/']
        assert config.output.directory == '/tmp/out'

    def test_no_gateway_env(self):
        with patch.dict(os.environ, {'GENE_ANALYSIS_NO_GATEWAY': '1'}):
            config = Config.default()
            config.gateways.urls = ['http://a/']
            config.merge_env_vars()

        assert config.active_gateways == []

    def test_merge_cli_args(self):
        config = Config.default()
        config.merge_cli_args(
            api_key='cli_key',
            email='cli@example.org',
            gateways=('http://relay/?url={url}',),
            formats=('json',),
            output_dir='exports'
        )

        assert config.api.ncbi_api_key == 'cli_key'
        assert config.api.email == 'cli@example.org'
        assert config.active_gateways == ['http://relay/?url={url}']
        assert config.output.formats == ['json']
        assert config.output.directory == 'exports'

    def test_empty_cli_args_keep_config(self):
        config = Config.default()
        config.output.formats = ['txt']
        config.merge_cli_args(api_key=None, email=None, gateways=(), formats=())

        assert config.output.formats == ['txt']
        assert config.api.ncbi_api_key is None

    def test_gateways_disabled(self):
        config = Config(api=APIConfig(), gateways=GatewayConfig(enabled=False, urls=['x']),
                        limits=Config.default().limits, relay=Config.default().relay,
                        output=Config.default().output)
        assert config.active_gateways == []

    def test_create_example_config(self, temp_dir):
        path = create_example_config(temp_dir / "example.json")

        data = json.loads(path.read_text())
        assert data['api']['email'] == "your_email@example.com"
        assert data['gateways']['urls'] == ["http://127.0.0.1:5050/relay?url={url}"]

    def test_default_config_path(self):
        assert get_default_config_path().name.endswith('.json')
