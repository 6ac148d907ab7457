from __future__ import annotations

import shutil
import subprocess
import uuid
from collections.abc import Generator

import pytest

from podman_query import (
    ContainerNotFoundError,
    InvocationError,
    Podman,
    PodmanConfig,
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("podman") is None, reason="podman not found in PATH"),
]


@pytest.fixture
def live_podman() -> Podman:
    """Adapter talking to the podman installed on this host."""
    return Podman(PodmanConfig.from_env())


@pytest.fixture
def created_container(container_prefix: str) -> Generator[str, None, None]:
    """A stopped container that exists for the duration of one test."""
    podman_exe = shutil.which("podman")
    assert podman_exe is not None
    name = f"{container_prefix}-{uuid.uuid4().hex[:8]}"
    result = subprocess.run(  # noqa: S603
        [podman_exe, "create", "--name", name, "docker.io/library/alpine:latest", "true"],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        pytest.skip(f"could not create a test container: {result.stderr.strip()}")
    yield name
    subprocess.run([podman_exe, "rm", "-f", name], capture_output=True, check=False)  # noqa: S603


@pytest.fixture
def running_container(container_prefix: str) -> Generator[str, None, None]:
    """A running container, so a bare ``podman ps`` lists at least one entry."""
    podman_exe = shutil.which("podman")
    assert podman_exe is not None
    name = f"{container_prefix}-{uuid.uuid4().hex[:8]}"
    result = subprocess.run(  # noqa: S603
        [podman_exe, "run", "-d", "--name", name]
        + ["docker.io/library/alpine:latest", "sleep", "300"],
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        pytest.skip(f"could not start a test container: {result.stderr.strip()}")
    yield name
    subprocess.run([podman_exe, "rm", "-f", name], capture_output=True, check=False)  # noqa: S603


class TestCheckVersion:
    def test_required_version_greater_than_supported(self, live_podman: Podman) -> None:
        assert live_podman.check_version("10.1.1") is False

    def test_required_version_lower_than_supported(self, live_podman: Podman) -> None:
        assert live_podman.check_version("1.0.0") is True


class TestContainerExists:
    def test_non_existing_container(self, live_podman: Podman) -> None:
        with pytest.raises(ContainerNotFoundError) as excinfo:
            live_podman.container_exists("container-1")
        assert str(excinfo.value) == "failed to find container container-1"

    def test_existing_container(self, live_podman: Podman, created_container: str) -> None:
        assert live_podman.container_exists(created_container) is True


class TestGetContainers:
    def test_no_args_return_running_containers(
        self, live_podman: Podman, running_container: str
    ) -> None:
        containers = live_podman.get_containers()
        assert containers
        assert running_container in [name for c in containers for name in c.names]

    def test_all_includes_stopped_containers(
        self, live_podman: Podman, created_container: str
    ) -> None:
        containers = live_podman.get_containers("--all")
        assert containers
        assert created_container in [name for c in containers for name in c.names]

    def test_invalid_args_raise(self, live_podman: Podman) -> None:
        with pytest.raises(InvocationError) as excinfo:
            live_podman.get_containers("invalid")
        assert str(excinfo.value) == "failed to invoke podman(1)"


class TestGetVersion:
    def test_version_has_three_segments(self, live_podman: Podman) -> None:
        version = live_podman.get_version()
        assert len(version.split(".")) == 3
