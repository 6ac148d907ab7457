from __future__ import annotations

import shutil
import sys
from collections.abc import Callable
from pathlib import Path

from .core import Podman, PodmanConfig
from .errors import PodmanError


def _podman() -> Podman:
    return Podman(PodmanConfig.from_env())


# --------------------------------------------------------------------------- #
# Pretty failure printer
# --------------------------------------------------------------------------- #
def _fail(msg: str) -> None:
    header = "=" * 70
    print(f"\n{header}\n[ERROR] {msg}\n{header}\n", file=sys.stderr)  # noqa: T201
    sys.exit(1)


# --------------------------------------------------------------------------- #
# Individual checks
# --------------------------------------------------------------------------- #
def _check_podman_in_path() -> None:
    configured = PodmanConfig.from_env().executable
    if configured:
        if not shutil.which(configured):
            _fail(f"PODMAN_QUERY_EXE={configured} is not an executable")
        return
    if not shutil.which("podman"):
        _fail("'podman' not found in PATH\nInstall: https://podman.io/getting-started/install.html")


def _check_podman_version() -> None:
    podman = _podman()
    try:
        found = podman.get_version()
    except PodmanError:
        return  # Already failed in PATH check
    if not podman.check_version(podman.config.min_version):
        _fail(
            f"podman >= {podman.config.min_version} required, found {found}\n"
            "Upgrade your system packages or use a newer image in CI"
        )


def _check_storage_writable() -> None:
    podman = _podman()
    try:
        graph_root = Path(podman.info("{{.Store.GraphRoot}}"))
    except PodmanError:
        return
    if not graph_root.exists():
        _fail(f"Podman storage path missing: {graph_root}")
    test_file = graph_root / ".podman-query-test-write"
    try:
        test_file.write_text("test")
        test_file.unlink()
    except OSError as e:
        _fail(
            f"Podman storage not writable: {graph_root}\n"
            f"Error: {e}\n"
            "Fix: chown $USER -R ~/.local/share/containers"
        )


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #
CHECKS: list[Callable[[], None]] = [
    _check_podman_in_path,
    _check_podman_version,
    _check_storage_writable,
]


def run_preflight_checks(custom_checks: list[Callable[[], None]] | None = None) -> None:
    """Verify podman is usable before querying it."""
    all_checks = CHECKS + (custom_checks or [])
    for check in all_checks:
        try:
            check()
        except Exception as e:
            _fail(str(e))
