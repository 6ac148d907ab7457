"""Print the podman version and check it against a few requirements."""

import logging

import podman_query

logging.basicConfig(level=logging.INFO)

print(f"podman {podman_query.get_version()}")

for required in ("1.0.0", "4.0.0", "10.1.1"):
    ok = podman_query.check_version(required)
    print(f"  >= {required}: {'yes' if ok else 'no'}")
