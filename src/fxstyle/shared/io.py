from __future__ import annotations

from pathlib import Path
from typing import Final

from pydantic import BaseModel, Field

SUPPORTED_WORKBOOK_SUFFIXES: Final[frozenset[str]] = frozenset({".xlsx", ".xlsm"})


class PathPolicy(BaseModel):
    """Filesystem access policy for workbook formatting requests."""

    root: Path = Field(..., description="Root directory for allowed access.")
    deny_globs: list[str] = Field(
        default_factory=list, description="Glob patterns to deny."
    )

    def normalize_root(self) -> Path:
        """Return the resolved root path."""
        return self.root.resolve()

    def ensure_allowed(self, path: Path) -> Path:
        """Validate that a path is within root and not denied.

        Args:
            path: Candidate path; relative paths are resolved from root.

        Returns:
            Resolved path if allowed.

        Raises:
            ValueError: If the path is outside the root or denied by glob.
        """
        root = self.normalize_root()
        candidate = path if path.is_absolute() else root / path
        resolved = candidate.resolve()
        if resolved != root and root not in resolved.parents:
            raise ValueError(
                f"Path is outside root. resolved={resolved}, root={root}. "
                "Pass a path relative to the server --root directory."
            )
        if self._is_denied(resolved, root):
            raise ValueError(f"Path is denied by policy: {resolved}")
        return resolved

    def _is_denied(self, path: Path, root: Path) -> bool:
        """Return True if the path matches any deny glob."""
        rel = path.relative_to(root)
        return any(
            rel.match(pattern) or path.match(pattern) for pattern in self.deny_globs
        )


def resolve_input_path(path: Path, *, policy: PathPolicy | None) -> Path:
    """Resolve an input workbook path and check that it can be formatted.

    Raises:
        FileNotFoundError: If the workbook does not exist.
        ValueError: If the path is not allowed or has an unsupported extension.
    """
    resolved = policy.ensure_allowed(path) if policy else path.resolve()
    if not resolved.is_file():
        raise FileNotFoundError(f"Workbook not found: {resolved}")
    ensure_supported_extension(resolved)
    return resolved


def ensure_supported_extension(path: Path) -> None:
    """Reject workbook formats that openpyxl/Excel styling cannot round-trip."""
    if path.suffix.lower() not in SUPPORTED_WORKBOOK_SUFFIXES:
        supported = ", ".join(sorted(SUPPORTED_WORKBOOK_SUFFIXES))
        raise ValueError(
            f"Unsupported workbook extension: {path.suffix or '(none)'}. "
            f"Supported: {supported}."
        )
