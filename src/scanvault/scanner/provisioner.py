"""One-time resolution of the scanner tool directory."""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from scanvault.exceptions import ProvisionError
from scanvault.scanner.engines import ScannerEngine

logger = logging.getLogger(__name__)


def version_satisfies(version: str, requirement: str) -> bool:
    """Return True when *version* matches the PEP 440 *requirement*.

    Versions that cannot be parsed never match.
    """
    try:
        return SpecifierSet(requirement).contains(Version(version), prereleases=True)
    except (InvalidSpecifier, InvalidVersion):
        return False


class ScannerProvisioner:
    """Find or install a scanner version satisfying the engine's requirement.

    The outcome, a directory or an error, is computed at most once and then
    shared by every caller. A failure is never retried automatically.
    """

    def __init__(self, engine: ScannerEngine, bootstrap_dir: Path) -> None:
        self.engine = engine
        self.bootstrap_dir = bootstrap_dir
        self._lock = threading.Lock()
        self._resolved = False
        self._scanner_dir: Path | None = None
        self._error: ProvisionError | None = None

    def resolve(self) -> Path | None:
        """Return the directory holding the scanner executable.

        Library-only engines need no executable and resolve to None.
        Raises ProvisionError when the required version is unavailable.
        """
        with self._lock:
            if not self._resolved:
                try:
                    self._scanner_dir = self._provision()
                except ProvisionError as exc:
                    self._error = exc
                self._resolved = True
                self.engine.scanner_dir = self._scanner_dir

        if self._error is not None:
            raise self._error
        return self._scanner_dir

    def executable(self) -> Path | None:
        scanner_dir = self.resolve()
        if scanner_dir is None:
            return None
        return scanner_dir / self.engine.command()

    def _provision(self) -> Path | None:
        engine = self.engine
        command = engine.command()
        if not command:
            logger.info("Skipping provisioning of scanner '%s' as it has no executable.", engine.name)
            return None

        requirement = engine.version_requirement
        found = shutil.which(command)
        if found:
            directory = Path(found).resolve().parent
            try:
                actual = engine.get_version(directory)
            except ProvisionError as exc:
                logger.warning("Ignoring '%s' found on PATH: %s", command, exc)
            else:
                if version_satisfies(actual, requirement):
                    logger.info("Using %s %s from %s.", engine.name, actual, directory)
                    engine.resolved_version = actual
                    return directory
                logger.info(
                    "Found %s %s on PATH which does not satisfy '%s'; bootstrapping %s.",
                    engine.name,
                    actual,
                    requirement,
                    engine.version,
                )
        else:
            logger.info("Scanner '%s' not found on PATH; bootstrapping %s.", command, engine.version)

        try:
            directory = engine.bootstrap(self.bootstrap_dir)
        except ProvisionError:
            raise
        except (OSError, ValueError) as exc:
            raise ProvisionError(f"Bootstrapping {engine.name} {engine.version} failed: {exc}") from exc

        actual = engine.get_version(directory)
        if not version_satisfies(actual, requirement):
            raise ProvisionError(
                f"Bootstrapped {engine.name} version {actual} does not match the required version {requirement}."
            )
        logger.info("Using bootstrapped %s %s from %s.", engine.name, actual, directory)
        engine.resolved_version = actual
        return directory
