"""Phase orchestration: configure, set up, hand targets to a load driver, clean up."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from .benchmarktests import (
    BenchmarkRegistry,
    CleanedTest,
    CleanupError,
    ConfiguredTest,
    ProvisionedTest,
    ProvisioningError,
    TopLevelOptions,
)
from .benchmarktests.types import BenchmarkError
from .config import BenchmarkBlock
from .server import ServerHandle

LOG = logging.getLogger(__name__)

LoadDriver = Callable[[ServerHandle, Sequence[ProvisionedTest]], None]


@dataclass(frozen=True, slots=True)
class NamedTest:
    """A configured test paired with the mount name it asked for."""

    mount_hint: str
    test: ConfiguredTest


@dataclass(slots=True)
class RunResult:
    """Outcome of a full benchmark run."""

    provisioned: list[ProvisionedTest] = field(default_factory=list)
    cleaned: list[CleanedTest] = field(default_factory=list)
    cleanup_errors: list[CleanupError] = field(default_factory=list)


class DriverError(BenchmarkError):
    """Raised when the external load driver fails."""


def configure_tests(registry: BenchmarkRegistry, blocks: Iterable[BenchmarkBlock]) -> list[NamedTest]:
    """Decode each block with its registered test type."""

    configured: list[NamedTest] = []
    for block in blocks:
        test_type = registry.get(block.type)
        configured.append(NamedTest(mount_hint=block.name, test=test_type.parse_config(block.body())))
    return configured


class BenchmarkRunner:
    """Runs each lifecycle phase for every configured test, in order."""

    def __init__(
        self,
        registry: BenchmarkRegistry,
        server: ServerHandle,
        options: TopLevelOptions | None = None,
    ) -> None:
        self._registry = registry
        self._server = server
        self._options = options or TopLevelOptions()

    def configure(self, blocks: Iterable[BenchmarkBlock]) -> list[NamedTest]:
        """Decode every block; nothing touches the server until all succeed."""

        return configure_tests(self._registry, blocks)

    def setup(self, configured: Sequence[NamedTest]) -> list[ProvisionedTest]:
        """Provision tests one at a time.

        If a test fails to provision, tests set up before it are cleaned up and
        the error is re-raised. The failing test's partial resources are left
        on the server.
        """

        provisioned: list[ProvisionedTest] = []
        for named in configured:
            try:
                provisioned.append(named.test.setup(self._server, named.mount_hint, self._options))
            except ProvisioningError:
                LOG.error(
                    "Provisioning failed",
                    extra={"test_type": named.test.test_type, "mount_hint": named.mount_hint},
                )
                self.cleanup(provisioned)
                raise
        return provisioned

    def cleanup(self, provisioned: Sequence[ProvisionedTest]) -> RunResult:
        """Tear down every test; failures are logged and collected, never raised."""

        result = RunResult(provisioned=list(provisioned))
        for test in provisioned:
            try:
                result.cleaned.append(test.cleanup(self._server))
            except CleanupError as exc:
                LOG.warning("Cleanup failed: %s", exc, extra={"test_type": test.test_type})
                result.cleanup_errors.append(exc)
        return result

    def run(self, blocks: Iterable[BenchmarkBlock], driver: LoadDriver) -> RunResult:
        configured = self.configure(blocks)
        provisioned = self.setup(configured)
        try:
            driver(self._server, provisioned)
        finally:
            result = self.cleanup(provisioned)
        return result


class SubprocessDriver:
    """Writes vegeta JSON targets to a file and runs an external load tool."""

    def __init__(self, command: Sequence[str], targets_file: Path) -> None:
        self._command = list(command)
        self._targets_file = targets_file

    def write_targets(self, server: ServerHandle, tests: Sequence[ProvisionedTest]) -> Path:
        self._targets_file.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(test.target(server).to_json_target()) for test in tests]
        self._targets_file.write_text("\n".join(lines) + "\n")
        return self._targets_file

    def __call__(self, server: ServerHandle, tests: Sequence[ProvisionedTest]) -> None:
        self.write_targets(server, tests)
        if not self._command:
            return
        LOG.info("Starting load driver", extra={"command": self._command})
        try:
            result = subprocess.run(self._command)
        except OSError as exc:
            raise DriverError(f"failed to start load driver {self._command[0]!r}: {exc}") from exc
        if result.returncode != 0:
            raise DriverError(f"load driver exited with status {result.returncode}")


__all__ = ["BenchmarkRunner", "DriverError", "LoadDriver", "NamedTest", "RunResult", "SubprocessDriver", "configure_tests"]
