from importlib.metadata import PackageNotFoundError, version

from .core import (
    MIN_PODMAN_VERSION,
    Podman,
    PodmanConfig,
    check_version,
    container_exists,
    default_podman,
    get_containers,
    get_images,
    get_version,
    image_exists,
    inspect,
    is_toolbox_container,
    is_toolbox_image,
    pull,
    remove_container,
    remove_image,
    set_log_level,
)
from .errors import (
    ConfigError,
    ContainerNotFoundError,
    ContainerRunningError,
    ImageHasChildrenError,
    ImageNotFoundError,
    InvocationError,
    NotFoundError,
    ParseError,
    PodmanError,
    PullError,
    RemoveError,
    VersionParseError,
)
from .parsing import ContainerRecord, ImageRecord

try:
    __version__ = version("podman-query")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "MIN_PODMAN_VERSION",
    "ConfigError",
    "ContainerNotFoundError",
    "ContainerRecord",
    "ContainerRunningError",
    "ImageHasChildrenError",
    "ImageNotFoundError",
    "ImageRecord",
    "InvocationError",
    "NotFoundError",
    "ParseError",
    "Podman",
    "PodmanConfig",
    "PodmanError",
    "PullError",
    "RemoveError",
    "VersionParseError",
    "__version__",
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
