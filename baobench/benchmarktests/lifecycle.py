"""Benchmark test states.

Each phase is its own immutable type, and transitions return a new object:

``ConfiguredTest.setup`` -> ``ProvisionedTest`` -> ``ProvisionedTest.cleanup``
-> ``CleanedTest``. A provisioned test keeps only runtime state, so
``target`` can be called from any number of threads without locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar

from baobench.server import ServerError, ServerHandle

from .provisioning import ProvisioningPlan, provision
from .types import (
    CleanupError,
    LifecyclePhase,
    RequestDescriptor,
    RuntimeDescriptor,
    TargetInfo,
    TopLevelOptions,
)

LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfiguredTest:
    """A decoded test waiting to be provisioned."""

    phase: ClassVar[LifecyclePhase] = LifecyclePhase.CONFIGURED

    test_type: str
    method: str
    plan: ProvisioningPlan

    def setup(
        self,
        server: ServerHandle,
        mount_hint: str,
        options: TopLevelOptions | None = None,
    ) -> ProvisionedTest:
        """Provision server-side resources and return the runtime-bound test."""

        runtime = provision(server, self.plan, mount_hint, options or TopLevelOptions())
        LOG.info(
            "Provisioned benchmark test",
            extra={"test_type": self.test_type, "mount_path": runtime.mount_path},
        )
        return ProvisionedTest(test_type=self.test_type, method=self.method, runtime=runtime)


@dataclass(frozen=True, slots=True)
class ProvisionedTest:
    """A test bound to a mount; safe to share across load workers."""

    phase: ClassVar[LifecyclePhase] = LifecyclePhase.PROVISIONED

    test_type: str
    method: str
    runtime: RuntimeDescriptor

    def target(self, server: ServerHandle) -> RequestDescriptor:
        """Build the credential request; performs no I/O."""

        return RequestDescriptor(
            method=self.method,
            url=f"{server.address}{self.runtime.mount_path}/creds/{self.runtime.role_name}",
            headers=dict(self.runtime.headers),
        )

    def target_info(self) -> TargetInfo:
        return TargetInfo(method=self.method, path_prefix=self.runtime.mount_path)

    def cleanup(self, server: ServerHandle) -> CleanedTest:
        """Remove the mount. Calling this twice surfaces the server's not-found error."""

        path = self.runtime.management_path
        LOG.debug("Cleaning up mount", extra={"mount_path": self.runtime.mount_path})
        try:
            server.delete(path)
        except ServerError as exc:
            raise CleanupError(path, str(exc)) from exc
        return CleanedTest(test_type=self.test_type, mount_path=self.runtime.mount_path)


@dataclass(frozen=True, slots=True)
class CleanedTest:
    """Terminal state: the mount has been removed."""

    phase: ClassVar[LifecyclePhase] = LifecyclePhase.CLEANED

    test_type: str
    mount_path: str


__all__ = ["CleanedTest", "ConfiguredTest", "ProvisionedTest"]
