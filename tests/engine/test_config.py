"""
Tests for engine configuration
"""

import pytest

from stquery.core.exceptions import ValidationError
from stquery.engine.config import DEFAULT_TREE_ORDER, EngineConfig


class TestEngineConfig:
    """Test EngineConfig validation and environment loading"""

    def test_defaults(self):
        config = EngineConfig()
        assert config.max_workers >= 1
        assert config.executor == "thread"
        assert config.default_parallelism == 4
        assert config.max_task_retries == 0
        assert DEFAULT_TREE_ORDER == 10

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_workers": 0},
            {"executor": "gpu"},
            {"default_parallelism": 0},
            {"max_task_retries": -1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            EngineConfig(**kwargs)

    def test_from_env(self):
        config = EngineConfig.from_env(
            {
                "STQUERY_MAX_WORKERS": "3",
                "STQUERY_PARALLELISM": "7",
                "STQUERY_TASK_RETRIES": "2",
                "STQUERY_EXECUTOR": " Process ",
            }
        )
        assert config == EngineConfig(
            max_workers=3, executor="process", default_parallelism=7, max_task_retries=2
        )

    def test_from_env_unset_keeps_defaults(self):
        assert EngineConfig.from_env({}).default_parallelism == 4

    def test_from_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("STQUERY_PARALLELISM", "9")
        assert EngineConfig.from_env().default_parallelism == 9

    def test_from_env_not_an_integer(self):
        with pytest.raises(ValidationError, match="STQUERY_MAX_WORKERS"):
            EngineConfig.from_env({"STQUERY_MAX_WORKERS": "many"})
