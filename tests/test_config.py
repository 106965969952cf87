from pathlib import Path

import pytest

from core.config import DEFAULT_OPENAI_URL, UpstreamTarget, load_config, unset_variables
from core.exceptions import ConfigurationError


class TestUpstreamTarget:
    def test_parse_default_url(self):
        target = UpstreamTarget.parse(DEFAULT_OPENAI_URL)
        assert target == UpstreamTarget("https", "api.deepinfra.com", "/v1/openai")
        assert target.origin == "https://api.deepinfra.com"

    def test_parse_keeps_port_and_trims_slash(self):
        target = UpstreamTarget.parse("http://localhost:9000/base/")
        assert target.host == "localhost:9000"
        assert target.base_path == "/base"

    def test_parse_without_path(self):
        assert UpstreamTarget.parse("https://api.openai.com").base_path == ""

    @pytest.mark.parametrize("url", ["ftp://example.com/x", "not a url", "https://", "://broken"])
    def test_parse_rejects_unusable_urls(self, url):
        with pytest.raises(ConfigurationError):
            UpstreamTarget.parse(url)


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({})
        assert config.upstream.base_url == DEFAULT_OPENAI_URL
        assert config.upstream.api_key is None
        assert config.proxy.host == "0.0.0.0"
        assert config.proxy.port == 8080
        assert config.identity.cidr == "32.250.0.0/14"
        assert config.identity.inject_real_ip is True
        assert config.limits.read_timeout == 300.0
        assert config.limits.write_timeout == 300.0
        assert config.limits.idle_timeout == 600

    def test_environment_overrides(self, tmp_path):
        config = load_config(
            {
                "OPENAI_URL": "http://upstream:8000/v1",
                "OPENAI_API_KEY": "sk-abc",
                "PORT": "9090",
                "FAKE_IP_CIDR": "10.0.0.0/8",
                "INJECT_REAL_IP": "false",
                "READ_TIMEOUT": "12.5",
                "IDLE_TIMEOUT": "30",
                "LOG_DIR": str(tmp_path),
            }
        )
        assert config.upstream_target() == UpstreamTarget("http", "upstream:8000", "/v1")
        assert config.upstream.api_key == "sk-abc"
        assert config.proxy.port == 9090
        assert config.identity.cidr == "10.0.0.0/8"
        assert config.identity.inject_real_ip is False
        assert config.limits.read_timeout == 12.5
        assert config.limits.idle_timeout == 30
        assert config.logging.log_dir == Path(tmp_path)

    def test_empty_values_use_defaults(self):
        config = load_config({"OPENAI_URL": "", "PORT": ""})
        assert config.upstream.base_url == DEFAULT_OPENAI_URL
        assert config.proxy.port == 8080

    @pytest.mark.parametrize("env", [{"PORT": "http"}, {"PORT": "70000"}, {"READ_TIMEOUT": "-1"}])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            load_config(env)

    def test_invalid_upstream_url_is_fatal(self):
        with pytest.raises(ConfigurationError):
            load_config({"OPENAI_URL": "ftp://files.example.com"})


def test_unset_variables():
    missing = unset_variables({"OPENAI_URL": "https://x.example.com", "PORT": ""})
    assert "OPENAI_URL" not in missing
    assert "PORT" in missing
