"""List every container and flag the ones created by toolbox."""

import podman_query

containers = podman_query.get_containers("--all")
if not containers:
    print("No containers")

for c in containers:
    toolbox = "toolbox" if podman_query.is_toolbox_container(c.id) else ""
    print(f"{c.id[:12]}  {c.name:<30} {c.state:<10} {c.image}  {toolbox}")

try:
    podman_query.container_exists("no-such-container")
except podman_query.ContainerNotFoundError as e:
    print(e)
