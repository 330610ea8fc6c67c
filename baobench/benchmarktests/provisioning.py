"""Mount and resource provisioning for benchmark tests."""

from __future__ import annotations

import logging
import posixpath
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping

from baobench.server import ServerError, ServerHandle

from .types import API_VERSION_PREFIX, ProvisioningError, RuntimeDescriptor, TopLevelOptions

LOG = logging.getLogger(__name__)

STAGE_MOUNT = "mount"
STAGE_CONNECTION = "connection-config"
STAGE_ROLE = "role-config"


@dataclass(frozen=True, slots=True)
class WriteStep:
    """A key/value write relative to the mount path."""

    path: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    label: str = ""

    @property
    def name(self) -> str:
        return posixpath.basename(self.path)


@dataclass(frozen=True, slots=True)
class ProvisioningPlan:
    """Everything setup needs to create a test's server-side resources."""

    backend_type: str
    connection: WriteStep
    role: WriteStep

    @property
    def role_name(self) -> str:
        return self.role.name


def resolve_mount_path(mount_hint: str, options: TopLevelOptions) -> str:
    """Return the mount path, randomised when the harness asks for it."""

    if options.random_mounts:
        return str(uuid.uuid4())
    return mount_hint


def provision(
    server: ServerHandle,
    plan: ProvisioningPlan,
    mount_hint: str,
    options: TopLevelOptions,
) -> RuntimeDescriptor:
    """Create the mount, connection and role; return the runtime descriptor.

    Steps run in order and stop at the first failure. Resources created by
    earlier steps are left in place.
    """

    mount_path = resolve_mount_path(mount_hint, options)

    LOG.debug(
        "Mounting secrets engine",
        extra={"backend_type": plan.backend_type, "mount_path": mount_path},
    )
    try:
        server.mount(mount_path, plan.backend_type)
    except ServerError as exc:
        raise ProvisioningError(STAGE_MOUNT, f"error mounting {plan.backend_type} secrets engine: {exc}") from exc

    _write(server, mount_path, plan.connection, STAGE_CONNECTION)
    _write(server, mount_path, plan.role, STAGE_ROLE)

    return RuntimeDescriptor(
        mount_path=API_VERSION_PREFIX + mount_path,
        role_name=plan.role_name,
        headers=server.headers(),
    )


def _write(server: ServerHandle, mount_path: str, step: WriteStep, stage: str) -> None:
    path = posixpath.join(mount_path, step.path)
    LOG.debug("Writing %s", step.label or stage, extra={"mount_path": mount_path, "resource": step.name})
    try:
        server.write(path, step.payload)
    except ServerError as exc:
        raise ProvisioningError(stage, f"error writing {step.label or stage} {step.name!r}: {exc}") from exc


__all__ = [
    "ProvisioningPlan",
    "STAGE_CONNECTION",
    "STAGE_MOUNT",
    "STAGE_ROLE",
    "WriteStep",
    "provision",
    "resolve_mount_path",
]
