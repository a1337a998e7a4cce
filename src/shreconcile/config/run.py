"""Run-level toggles shared by both engines."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Final

from .env import env_flag

DEFAULT_TOUCH_BATCH_SIZE: Final[int] = 1000


@dataclass(frozen=True, slots=True)
class RunConfig:
    cleanup: bool = False
    debug: bool = False
    test_connect: bool = False
    touch_batch_size: int = DEFAULT_TOUCH_BATCH_SIZE

    def with_overrides(
        self,
        *,
        cleanup: bool = False,
        debug: bool = False,
        test_connect: bool = False,
    ) -> RunConfig:
        """Command line switches can only turn a flag on."""

        return replace(
            self,
            cleanup=self.cleanup or cleanup,
            debug=self.debug or debug,
            test_connect=self.test_connect or test_connect,
        )


def get_run_config() -> RunConfig:
    return RunConfig(
        cleanup=env_flag("SH_CLEANUP"),
        debug=env_flag("SH_DEBUG"),
        test_connect=env_flag("SH_TEST_CONNECT"),
    )
