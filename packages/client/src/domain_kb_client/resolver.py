"""Locate a sibling server executable from a configured path.

The configured value may be absolute, relative to the interpreter's
directory, or relative to a repository root somewhere above it, and may or
may not carry an extension. With ``/repo`` holding a ``pyproject.toml``:

    >>> resolver = ExecutableResolver(base_directory=Path("/repo/.venv/bin"))
    >>> resolution = resolver.resolve("scripts/kb_server")
    >>> resolution.resolved_path
    '/repo/scripts/kb_server.py'
    >>> resolution.launch_args  # launched as ``sys.executable <path>``
    ('/repo/scripts/kb_server.py',)
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator, Optional

from domain_kb_common import get_logger

from domain_kb_client.models import ExecutableResolution

logger = get_logger(__name__)

NATIVE_EXTENSION = ".exe"
RUNTIME_EXTENSION = ".py"

# Marker files/directories identifying a repository root
REPO_MARKER_FILES = ("pyproject.toml",)
REPO_MARKER_GLOBS = ("*.sln",)
REPO_MARKER_DIRS = (".git",)

DEFAULT_MAX_DEPTH = 8


def strip_quotes(value: str) -> str:
    """Trim and remove one layer of matching surrounding quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1].strip()
    return value


def _has_repo_marker(directory: Path) -> bool:
    try:
        if any((directory / name).is_file() for name in REPO_MARKER_FILES):
            return True
        if any((directory / name).is_dir() for name in REPO_MARKER_DIRS):
            return True
        return any(next(directory.glob(pattern), None) is not None for pattern in REPO_MARKER_GLOBS)
    except OSError:
        return False


class ExecutableResolver:
    """Resolve configured server paths into launchable commands.

    Parameters
    ----------
    base_directory : Path, optional
        Directory relative values are resolved against first. Default: the
        directory of the running interpreter (where console scripts live).
    max_depth : int
        How many directories to walk upward looking for repository roots.
    runtime_command : str, optional
        Interpreter used to launch ``.py`` targets. Default: ``sys.executable``.
    """

    def __init__(
        self,
        base_directory: Optional[Path] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        runtime_command: Optional[str] = None,
    ) -> None:
        self.base_directory = Path(base_directory or Path(sys.executable).parent).absolute()
        self.max_depth = max_depth
        self.runtime_command = runtime_command or sys.executable

    def iter_repo_roots(self) -> Iterator[Path]:
        """Yield ancestors of the base directory that look like repository roots."""
        directory: Optional[Path] = self.base_directory
        for _ in range(self.max_depth):
            if directory is None:
                break
            if _has_repo_marker(directory):
                yield directory
            parent = directory.parent
            directory = parent if parent != directory else None

    def candidate_bases(self, value: str) -> list[str]:
        """Ordered, case-insensitively deduplicated candidate base paths."""
        path = Path(value)
        if path.is_absolute():
            return [str(path)]

        candidates: list[str] = []
        seen: set[str] = set()
        for root in (self.base_directory, *self.iter_repo_roots()):
            candidate = os.path.normpath(str(root / path))
            key = candidate.casefold()
            if key not in seen:
                seen.add(key)
                candidates.append(candidate)
        return candidates

    def _launch_for(self, path: str) -> tuple[str, tuple[str, ...]]:
        if path.lower().endswith(RUNTIME_EXTENSION):
            return self.runtime_command, (path,)
        return path, ()

    def resolve(self, configured_value: Optional[str]) -> ExecutableResolution:
        """Resolve a configured path.

        Args:
            configured_value: Raw configuration string (may be quoted/relative)

        Returns:
            ExecutableResolution; never raises for filesystem errors
        """
        if configured_value is None or not configured_value.strip():
            return ExecutableResolution(configured=False, resolved=False)

        value = strip_quotes(configured_value)
        if not value:
            return ExecutableResolution(configured=False, resolved=False)
        probed: list[str] = []

        try:
            for base in self.candidate_bases(value):
                native = base + NATIVE_EXTENSION
                runtime = base + RUNTIME_EXTENSION
                probed.extend([base, native, runtime])

                if os.path.isfile(base):
                    chosen = base
                elif os.path.isfile(native):
                    chosen = native
                elif os.path.isfile(runtime):
                    chosen = runtime
                else:
                    continue

                command, args = self._launch_for(chosen)
                logger.debug("kb_executable_resolved", path=chosen, probed=len(probed))
                return ExecutableResolution(
                    configured=True,
                    resolved=True,
                    resolved_path=chosen,
                    launch_command=command,
                    launch_args=args,
                    probed_paths=tuple(probed),
                )
        except (OSError, ValueError) as e:
            logger.warning("kb_executable_probe_failed", value=value, error=str(e))
            return ExecutableResolution(configured=True, resolved=False, probed_paths=tuple(probed))

        logger.debug("kb_executable_unresolved", value=value, probed=len(probed))
        return ExecutableResolution(configured=True, resolved=False, probed_paths=tuple(probed))
