# tests/test_config.py
"""
Tests for option validation and the error hierarchy.
"""

import pytest

from vector_pessimization.config import AnalyzerConfig
from vector_pessimization.errors import AnalyzerError, ConfigError, DumpLoadError


class TestAnalyzerConfig:

    def test_defaults(self):
        cfg = AnalyzerConfig.from_options(None)
        assert cfg.max_depth == 3
        assert cfg.containers == ("std::vector",)
        assert cfg == AnalyzerConfig()

    def test_max_depth(self):
        assert AnalyzerConfig.from_options({"max_depth": 5}).max_depth == 5

    @pytest.mark.parametrize("value", [0, -1])
    def test_max_depth_must_be_positive(self, value):
        with pytest.raises(ConfigError) as exc:
            AnalyzerConfig.from_options({"max_depth": value})
        assert exc.value.option == "max_depth"
        assert "at least 1" in str(exc.value)

    @pytest.mark.parametrize("value", ["3", 2.5, True, None])
    def test_max_depth_must_be_an_integer(self, value):
        with pytest.raises(ConfigError, match="expected an integer"):
            AnalyzerConfig.from_options({"max_depth": value})

    def test_single_container_string(self):
        cfg = AnalyzerConfig.from_options({"containers": "boost::container::vector"})
        assert cfg.containers == ("boost::container::vector",)

    def test_containers_are_normalised(self):
        cfg = AnalyzerConfig.from_options(
            {"containers": [" ::std::vector ", "", "llvm::SmallVector"]})
        assert cfg.containers == ("std::vector", "llvm::SmallVector")

    def test_empty_container_list_rejected(self):
        with pytest.raises(ConfigError):
            AnalyzerConfig.from_options({"containers": ["  "]})


class TestErrors:

    def test_hierarchy(self):
        assert issubclass(ConfigError, AnalyzerError)
        assert issubclass(DumpLoadError, AnalyzerError)

    def test_config_error_message(self):
        err = ConfigError("max_depth", 0, "must be at least 1")
        assert err.message == "invalid value for 'max_depth': must be at least 1"
        assert str(err) == "invalid value for 'max_depth': must be at least 1 (0)"
        assert err.error_id == "badConfiguration"

    def test_dump_load_error(self):
        err = DumpLoadError("a.dump", "no such file")
        assert str(err) == "cannot load dump file 'a.dump': no such file"
        assert err.path == "a.dump"
        assert err.error_id == "dumpLoadFailed"
