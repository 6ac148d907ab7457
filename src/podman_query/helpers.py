from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Mapping
from typing import Protocol

logger = logging.getLogger(__name__)

__all__ = ["CommandRunner", "get_podman_exe", "run_command"]


class CommandRunner(Protocol):
    """Anything able to run an argument list and hand back its completed process."""

    def __call__(
        self, args: list[str], env: Mapping[str, str] | None = None
    ) -> subprocess.CompletedProcess[str]: ...


def get_podman_exe() -> str:
    """Find podman executable."""
    exe = shutil.which("podman")
    if not exe:
        raise RuntimeError("podman not found in PATH")

    return exe


def run_command(
    args: list[str],
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``args`` to completion, capturing stdout and stderr as text.

    A non-zero exit status is returned, not raised; the caller decides what
    it means. Failing to start the process at all raises ``OSError``.
    """
    logger.debug("Running %s", " ".join(args))
    result = subprocess.run(  # noqa: S603
        args,
        capture_output=True,
        text=True,
        check=False,
        env=dict(env) if env is not None else None,
        timeout=timeout,
    )
    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        logger.debug("%s exited with %d: %s", args[0], result.returncode, stderr)
    return result
