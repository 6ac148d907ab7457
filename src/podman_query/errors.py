from __future__ import annotations

__all__ = [
    "ConfigError",
    "ContainerNotFoundError",
    "ContainerRunningError",
    "ImageHasChildrenError",
    "ImageNotFoundError",
    "InvocationError",
    "NotFoundError",
    "ParseError",
    "PodmanError",
    "PullError",
    "RemoveError",
    "VersionParseError",
]

INVOCATION_FAILED = "failed to invoke podman(1)"


class PodmanError(RuntimeError):
    """Base class for every error raised by podman_query."""


class InvocationError(PodmanError):
    """podman(1) could not be run or exited abnormally."""

    def __init__(
        self,
        message: str = INVOCATION_FAILED,
        *,
        cmd: list[str] | None = None,
        returncode: int | None = None,
        stderr: str | None = None,
    ):
        super().__init__(message)
        self.cmd = cmd or []
        self.returncode = returncode
        self.stderr = stderr


class NotFoundError(PodmanError):
    """A container or image lookup found no match."""


class ContainerNotFoundError(NotFoundError):
    pass


class ImageNotFoundError(NotFoundError):
    pass


class ParseError(PodmanError):
    """podman(1) output could not be decoded."""


class VersionParseError(ParseError):
    pass


class ContainerRunningError(PodmanError):
    pass


class ImageHasChildrenError(PodmanError):
    pass


class RemoveError(PodmanError):
    pass


class PullError(PodmanError):
    pass


class ConfigError(PodmanError, ValueError):
    """A configuration value (log level, minimum version) is invalid."""
