"""Tests for run options and the YAML config loader."""
import pytest

from specup_health.config import (
    ConfigError,
    ConfigLoader,
    HealthCheckConfig,
    OutputFormat,
    RunOptions,
    coerce_run_options,
    parse_config,
)


class TestRunOptions:

    def test_defaults(self):
        options = RunOptions()
        assert options.checks is None
        assert options.categories is None
        assert options.continue_on_error is True
        assert options.timeout == 30000
        assert options.parallel is False
        assert options.check_options == {}
        assert options.respect_dependencies is False

    def test_mapping_merged_over_defaults(self):
        options = coerce_run_options({"parallel": True, "checks": [" specs-json "]})
        assert options.parallel is True
        assert options.checks == ["specs-json"]
        assert options.timeout == 30000

    def test_none_and_instances(self):
        assert coerce_run_options(None) == RunOptions()
        options = RunOptions(timeout=5)
        assert coerce_run_options(options) is options

    @pytest.mark.parametrize("bad", [
        {"timeout": 0},
        {"timeout": -10},
        {"checks": [""]},
        {"categories": [None]},
        {"check_options": {"specs-json": "off"}},
    ])
    def test_invalid_values(self, bad):
        with pytest.raises(ConfigError):
            coerce_run_options(bad)

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            coerce_run_options(["parallel"])


class TestConfigFile:

    def test_directory_without_config_gives_defaults(self, tmp_path):
        loader = ConfigLoader(tmp_path).load()
        assert loader.source is None
        assert loader.config == HealthCheckConfig()

    def test_finds_config_in_directory(self, tmp_path):
        (tmp_path / ".healthcheck.yml").write_text(
            "disabled: [external-specs-urls]\n"
            "format: json\n"
            "timeout: 2000\n"
            "check_options:\n"
            "  specs-json:\n"
            "    check_accessibility: false\n"
        )
        loader = ConfigLoader(tmp_path).load()
        config = loader.config
        assert loader.source == tmp_path / ".healthcheck.yml"
        assert config.disabled == ["external-specs-urls"]
        assert config.format == OutputFormat.JSON
        assert config.timeout == 2000
        assert config.check_options == {"specs-json": {"check_accessibility": False}}

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("parallel: true\n")
        assert ConfigLoader(path).load().config.parallel is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / ".healthcheck.yaml"
        path.write_text("")
        assert ConfigLoader(tmp_path).load().config == HealthCheckConfig()

    def test_missing_path(self, tmp_path):
        with pytest.raises(ConfigError, match="does not exist"):
            ConfigLoader(tmp_path / "nope.yaml").load()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / ".healthcheck.yaml"
        path.write_text("timeout: [1, 2\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader(path).load()

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / ".healthcheck.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            ConfigLoader(path).load()

    def test_invalid_values(self):
        with pytest.raises(ConfigError):
            parse_config({"format": "html"})


def test_run_options_overrides():
    config = HealthCheckConfig(timeout=2000, parallel=True, disabled=["gitignore"])
    options = config.run_options(timeout=100, parallel=None, checks=["specs-json"])
    assert isinstance(options, RunOptions)
    assert not isinstance(options, HealthCheckConfig)
    assert options.timeout == 100
    assert options.parallel is True
    assert options.checks == ["specs-json"]


def test_run_options_invalid_override():
    with pytest.raises(ConfigError, match="Invalid run options"):
        HealthCheckConfig().run_options(categories=[" "])
