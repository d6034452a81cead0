"""
Engine configuration

Values come from constructor arguments or from STQUERY_* environment
variables via ``EngineConfig.from_env()``.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from stquery.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

EXECUTORS = ("thread", "process")

# Node capacity used for live R-trees when the caller does not pick one
DEFAULT_TREE_ORDER = 10

ENV_PREFIX = "STQUERY_"


@dataclass(frozen=True)
class EngineConfig:
    """
    Execution engine settings

    Attributes:
        max_workers: Worker threads/processes per parallel stage
        executor: "thread" or "process". Process workers need picklable
                  task functions, so user lambdas only work with threads.
        default_parallelism: Partitions created by ``parallelize``
        max_task_retries: Re-executions of a failed partition task before
                          the stage fails

    Examples:
        >>> config = EngineConfig(max_workers=8, executor="thread")
        >>> config = EngineConfig.from_env()  # STQUERY_MAX_WORKERS=8 ...
    """

    max_workers: int = field(default_factory=lambda: os.cpu_count() or 1)
    executor: str = "thread"
    default_parallelism: int = 4
    max_task_retries: int = 0

    def __post_init__(self):
        if self.max_workers <= 0:
            raise ValidationError(f"max_workers must be positive, got {self.max_workers}")
        if self.executor not in EXECUTORS:
            raise ValidationError(
                f"executor must be one of {', '.join(EXECUTORS)}, got {self.executor!r}"
            )
        if self.default_parallelism <= 0:
            raise ValidationError(
                f"default_parallelism must be positive, got {self.default_parallelism}"
            )
        if self.max_task_retries < 0:
            raise ValidationError(
                f"max_task_retries must not be negative, got {self.max_task_retries}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """
        Build a config from STQUERY_* variables

        Recognised: STQUERY_MAX_WORKERS, STQUERY_EXECUTOR,
        STQUERY_PARALLELISM, STQUERY_TASK_RETRIES. Unset variables keep
        their defaults.
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        for name, attr in (
            ("MAX_WORKERS", "max_workers"),
            ("PARALLELISM", "default_parallelism"),
            ("TASK_RETRIES", "max_task_retries"),
        ):
            raw = env.get(ENV_PREFIX + name)
            if raw is None:
                continue
            try:
                kwargs[attr] = int(raw)
            except ValueError:
                raise ValidationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None

        executor = env.get(ENV_PREFIX + "EXECUTOR")
        if executor is not None:
            kwargs["executor"] = executor.strip().lower()

        config = cls(**kwargs)
        logger.debug("Engine config from environment: %s", config)
        return config
