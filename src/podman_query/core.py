from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from subprocess import CompletedProcess, TimeoutExpired
from typing import Any

from .errors import (
    ConfigError,
    ContainerNotFoundError,
    ContainerRunningError,
    ImageHasChildrenError,
    ImageNotFoundError,
    InvocationError,
    PodmanError,
    PullError,
    RemoveError,
    VersionParseError,
)
from .helpers import CommandRunner, get_podman_exe, run_command
from .parsing import (
    ContainerRecord,
    ImageRecord,
    parse_containers,
    parse_images,
    parse_inspect,
    parse_version,
    parse_version_output,
)

__all__ = [
    "MIN_PODMAN_VERSION",
    "Podman",
    "PodmanConfig",
    "check_version",
    "container_exists",
    "default_podman",
    "get_containers",
    "get_images",
    "get_version",
    "image_exists",
    "inspect",
    "is_toolbox_container",
    "is_toolbox_image",
    "pull",
    "remove_container",
    "remove_image",
    "set_log_level",
]

logger = logging.getLogger(__name__)

MIN_PODMAN_VERSION = "1.4.0"

PODMAN_LOG_LEVELS = ("debug", "info", "warn", "error", "fatal", "panic")

TOOLBOX_LABELS = ("com.github.containers.toolbox", "com.github.debarshiray.toolbox")


def podman_log_level(level: int | str) -> str:
    """Translate a ``logging`` level or a podman level name to podman's ``--log-level``."""
    if isinstance(level, int):
        if level <= logging.DEBUG:
            return "debug"
        if level <= logging.INFO:
            return "info"
        if level <= logging.WARNING:
            return "warn"
        if level <= logging.ERROR:
            return "error"
        return "fatal"

    name = level.strip().lower()
    if name == "warning":
        name = "warn"
    if name not in PODMAN_LOG_LEVELS:
        raise ConfigError(f"Unknown podman log level: {level!r}")
    return name


@dataclass
class PodmanConfig:
    """How to reach podman.

    - ``executable`` → resolved from ``PATH`` on first use if ``None``
    - ``log_level`` → passed as ``--log-level`` to querying subcommands
    - ``min_version`` → oldest podman :meth:`Podman.check_version` accepts
    - ``podman_host`` → exported as ``PODMAN_HOST`` to every podman process
    """

    executable: str | None = None
    log_level: str = "error"
    min_version: str = MIN_PODMAN_VERSION
    podman_host: str | None = None
    timeout: float | None = None  # seconds, None waits for podman to exit

    def __post_init__(self) -> None:
        self.log_level = podman_log_level(self.log_level)
        try:
            parse_version(self.min_version)
        except VersionParseError as e:
            raise ConfigError(f"Invalid minimum podman version: {self.min_version!r}") from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> PodmanConfig:
        """Build a configuration from ``PODMAN_QUERY_*`` and ``PODMAN_HOST``."""
        env = os.environ if environ is None else environ
        return cls(
            executable=env.get("PODMAN_QUERY_EXE") or None,
            log_level=env.get("PODMAN_QUERY_LOG_LEVEL") or "error",
            min_version=env.get("PODMAN_QUERY_MIN_VERSION") or MIN_PODMAN_VERSION,
            podman_host=env.get("PODMAN_HOST") or None,
        )


class Podman:
    """Query adapter around the podman(1) command line."""

    def __init__(self, config: PodmanConfig | None = None, runner: CommandRunner | None = None):
        """Initialize the adapter; ``runner`` replaces the real process runner."""
        self.config = config or PodmanConfig()
        self._runner: CommandRunner = runner or partial(run_command, timeout=self.config.timeout)
        self._podman_exe: str | None = self.config.executable
        self._version: str | None = None

    # --------------------------------------------------------------------- #
    # Process plumbing
    # --------------------------------------------------------------------- #
    def _get_podman(self) -> str:
        if self._podman_exe is None:
            try:
                self._podman_exe = get_podman_exe()
            except RuntimeError as e:
                raise InvocationError() from e
        return self._podman_exe

    def _get_env(self) -> dict[str, str] | None:
        if not self.config.podman_host:
            return None
        return {**os.environ, "PODMAN_HOST": self.config.podman_host}

    def _run(self, *args: str) -> CompletedProcess[str]:
        cmd = [self._get_podman(), *args]
        try:
            return self._runner(cmd, self._get_env())
        except (OSError, TimeoutExpired) as e:
            raise InvocationError(cmd=cmd) from e

    def _query(self, *args: str) -> str:
        """Run a querying subcommand and return its stdout, raising on failure."""
        result = self._run("--log-level", self.config.log_level, *args)
        if result.returncode != 0:
            raise InvocationError(
                cmd=list(result.args), returncode=result.returncode, stderr=result.stderr
            )
        return result.stdout

    def set_log_level(self, level: int | str) -> None:
        """Set the ``--log-level`` handed to podman."""
        self.config.log_level = podman_log_level(level)

    # --------------------------------------------------------------------- #
    # Versions
    # --------------------------------------------------------------------- #
    def get_version(self) -> str:
        """Return the installed podman version as ``major.minor.patch``."""
        if self._version is None:
            self._version = parse_version_output(self._query("version", "--format", "json"))
            logger.debug("Detected podman %s", self._version)
        return self._version

    def check_version(self, required_version: str) -> bool:
        """Whether the installed podman is supported and at least ``required_version``."""
        try:
            required = parse_version(required_version)
        except VersionParseError:
            logger.debug("Ignoring malformed required version %r", required_version)
            return False

        try:
            current = parse_version(self.get_version())
        except PodmanError as e:
            logger.debug("Could not determine podman version: %s", e)
            return False

        if current < parse_version(self.config.min_version):
            logger.info(
                "podman %s is older than the supported minimum %s",
                ".".join(map(str, current)),
                self.config.min_version,
            )
            return False
        if current < required:
            logger.info(
                "podman %s is older than required %s", ".".join(map(str, current)), required_version
            )
            return False
        return True

    # --------------------------------------------------------------------- #
    # Containers
    # --------------------------------------------------------------------- #
    def container_exists(self, name: str) -> bool:
        """Return ``True`` if ``name`` exists, raise :class:`ContainerNotFoundError` if not."""
        result = self._run("container", "exists", name)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            raise ContainerNotFoundError(f"failed to find container {name}")
        raise InvocationError(
            cmd=list(result.args), returncode=result.returncode, stderr=result.stderr
        )

    def get_containers(self, *args: str) -> list[ContainerRecord]:
        """List containers; ``args`` are appended to ``podman ps`` unchecked."""
        return parse_containers(self._query("ps", "--format", "json", *args))

    def remove_container(self, name: str, force: bool = False) -> None:
        """Remove a container, optionally killing it first."""
        cmd = ["rm", *(["--force"] if force else []), name]
        result = self._run(*cmd)
        if result.returncode == 0:
            return
        if result.returncode == 1:
            raise ContainerNotFoundError(f"container {name} does not exist")
        if result.returncode == 2:
            raise ContainerRunningError(f"container {name} is running")
        raise RemoveError(f"failed to remove container {name}")

    def is_toolbox_container(self, name: str) -> bool:
        """Whether the container carries a toolbox label."""
        info = self.inspect("container", name)
        return _has_toolbox_label((info.get("Config") or {}).get("Labels"))

    # --------------------------------------------------------------------- #
    # Images
    # --------------------------------------------------------------------- #
    def get_images(self, *args: str) -> list[ImageRecord]:
        """List images; ``args`` are appended to ``podman images`` unchecked."""
        return parse_images(self._query("images", "--format", "json", *args))

    def image_exists(self, name: str) -> bool:
        """Return ``True`` if ``name`` exists, raise :class:`ImageNotFoundError` if not."""
        result = self._run("image", "exists", name)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            raise ImageNotFoundError(f"failed to find image {name}")
        raise InvocationError(
            cmd=list(result.args), returncode=result.returncode, stderr=result.stderr
        )

    def pull(self, image: str) -> None:
        """Pull ``image`` from its registry."""
        result = self._run("pull", image)
        if result.returncode != 0:
            raise PullError(f"failed to pull image {image}")

    def remove_image(self, name: str, force: bool = False) -> None:
        """Remove an image, optionally together with the containers using it."""
        cmd = ["rmi", *(["--force"] if force else []), name]
        result = self._run(*cmd)
        if result.returncode == 0:
            return
        if result.returncode == 1:
            raise ImageNotFoundError(f"image {name} does not exist")
        if result.returncode == 2:
            raise ImageHasChildrenError(f"image {name} has dependent children")
        raise RemoveError(f"failed to remove image {name}")

    def is_toolbox_image(self, name: str) -> bool:
        """Whether the image carries a toolbox label."""
        info = self.inspect("image", name)
        return _has_toolbox_label(info.get("Labels"))

    # --------------------------------------------------------------------- #
    # Inspection
    # --------------------------------------------------------------------- #
    def inspect(self, kind: str, target: str) -> dict[str, Any]:
        """Return ``podman inspect`` for one container or image."""
        if kind not in ("container", "image"):
            raise ValueError(f"Cannot inspect objects of type {kind!r}")
        return parse_inspect(self._query("inspect", "--format", "json", "--type", kind, target))

    def info(self, template: str) -> str:
        """Render one Go template against ``podman info``, e.g. ``{{.Store.GraphRoot}}``."""
        return self._query("info", "--format", template).strip()

    def __repr__(self) -> str:
        """Return a string representation of the adapter."""
        return f"<Podman exe={self._podman_exe} log_level={self.config.log_level}>"


def _has_toolbox_label(labels: Mapping[str, str] | None) -> bool:
    return any((labels or {}).get(label) == "true" for label in TOOLBOX_LABELS)


# --------------------------------------------------------------------------- #
# Module-level shortcuts on a shared adapter
# --------------------------------------------------------------------------- #
_default: Podman | None = None


def default_podman() -> Podman:
    """Return the adapter configured from the environment, creating it on first use."""
    global _default  # noqa: PLW0603
    if _default is None:
        _default = Podman(PodmanConfig.from_env())
    return _default


def check_version(required_version: str) -> bool:
    """Compare the installed podman against ``required_version``; never raises."""
    try:
        podman = default_podman()
    except ConfigError as e:
        logger.debug("Cannot configure podman: %s", e)
        return False
    return podman.check_version(required_version)


def container_exists(name: str) -> bool:
    """Return ``True`` if container ``name`` exists, raise if not."""
    return default_podman().container_exists(name)


def get_containers(*args: str) -> list[ContainerRecord]:
    """List containers through ``podman ps``."""
    return default_podman().get_containers(*args)


def get_version() -> str:
    """Return the installed podman version."""
    return default_podman().get_version()


def get_images(*args: str) -> list[ImageRecord]:
    """List images through ``podman images``."""
    return default_podman().get_images(*args)


def image_exists(name: str) -> bool:
    """Return ``True`` if image ``name`` exists, raise if not."""
    return default_podman().image_exists(name)


def inspect(kind: str, target: str) -> dict[str, Any]:
    """Return ``podman inspect`` for one container or image."""
    return default_podman().inspect(kind, target)


def is_toolbox_container(name: str) -> bool:
    """Whether the container carries a toolbox label."""
    return default_podman().is_toolbox_container(name)


def is_toolbox_image(name: str) -> bool:
    """Whether the image carries a toolbox label."""
    return default_podman().is_toolbox_image(name)


def pull(image: str) -> None:
    """Pull ``image`` from its registry."""
    default_podman().pull(image)


def remove_container(name: str, force: bool = False) -> None:
    """Remove a container."""
    default_podman().remove_container(name, force=force)


def remove_image(name: str, force: bool = False) -> None:
    """Remove an image."""
    default_podman().remove_image(name, force=force)


def set_log_level(level: int | str) -> None:
    """Set the ``--log-level`` handed to podman by the shared adapter."""
    default_podman().set_log_level(level)
