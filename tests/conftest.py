from __future__ import annotations

import subprocess
from collections.abc import Generator, Mapping

import pytest

import podman_query.core
from podman_query import Podman, PodmanConfig

# TEST CONSTANTS
PODMAN_EXE = "/usr/bin/podman"
TEST_CONTAINER_PREFIX = "podman-query-test"

VERSION_JSON = """{
  "Client": {
    "APIVersion": "4.3.1",
    "Version": "4.3.1",
    "GoVersion": "go1.19.2",
    "OsArch": "linux/amd64"
  },
  "Server": {
    "APIVersion": "4.3.1",
    "Version": "4.3.1",
    "GoVersion": "go1.19.2",
    "OsArch": "linux/amd64"
  }
}"""

PS_JSON = """[
  {
    "Id": "3f5a1d0c9b8e",
    "Names": ["toolbox-dev"],
    "Image": "registry.fedoraproject.org/fedora-toolbox:39",
    "State": "running",
    "Status": "Up 2 hours",
    "CreatedAt": "2 hours ago",
    "Labels": {"com.github.containers.toolbox": "true"}
  },
  {
    "Id": "77aa02bb13cc",
    "Names": ["web"],
    "Image": "docker.io/library/nginx:alpine",
    "State": "exited",
    "Status": "Exited (0) 5 minutes ago",
    "CreatedAt": "1 day ago",
    "Labels": null
  }
]"""

IMAGES_JSON = """[
  {
    "Id": "ab12cd34ef56",
    "Names": ["registry.fedoraproject.org/fedora-toolbox:39"],
    "Created": 1700000000,
    "Labels": {"com.github.containers.toolbox": "true"}
  }
]"""


class FakeRunner:
    """Command runner that answers podman invocations from canned results.

    Responses are registered per subcommand prefix (the arguments following the
    executable and any ``--log-level <level>`` pair). Unregistered commands fail
    the way podman does for an unknown command.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.envs: list[Mapping[str, str] | None] = []
        self._responses: dict[tuple[str, ...], tuple[int, str, str]] = {}

    def respond(
        self, *subcommand: str, returncode: int = 0, stdout: str = "", stderr: str = ""
    ) -> None:
        self._responses[subcommand] = (returncode, stdout, stderr)

    def __call__(
        self, args: list[str], env: Mapping[str, str] | None = None
    ) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(args))
        self.envs.append(env)

        rest = args[1:]
        if rest[:1] == ["--log-level"]:
            rest = rest[2:]

        for prefix in sorted(self._responses, key=len, reverse=True):
            if tuple(rest[: len(prefix)]) == prefix:
                returncode, stdout, stderr = self._responses[prefix]
                return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

        return subprocess.CompletedProcess(
            args, 125, stdout="", stderr=f'Error: unrecognized command `podman {" ".join(rest)}`'
        )


@pytest.fixture
def runner() -> FakeRunner:
    """A fresh fake runner with nothing registered."""
    return FakeRunner()


@pytest.fixture
def podman(runner: FakeRunner) -> Podman:
    """Adapter wired to the fake runner."""
    return Podman(PodmanConfig(executable=PODMAN_EXE), runner=runner)


@pytest.fixture(scope="session")
def container_prefix() -> str:
    """Expose the test container prefix for advanced use."""
    return TEST_CONTAINER_PREFIX


@pytest.fixture(autouse=True)
def reset_default_podman() -> Generator[None, None, None]:
    """Make every test start without a cached module-level adapter."""
    podman_query.core._default = None
    yield
    podman_query.core._default = None


@pytest.fixture
def version_json() -> str:
    """Output of ``podman version --format json``."""
    return VERSION_JSON


@pytest.fixture
def ps_json() -> str:
    """Output of ``podman ps --all --format json`` with two containers."""
    return PS_JSON


@pytest.fixture
def images_json() -> str:
    """Output of ``podman images --format json`` with one toolbox image."""
    return IMAGES_JSON
