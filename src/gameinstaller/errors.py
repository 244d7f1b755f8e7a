"""
Installer error taxonomy.

Every stage raises a subclass of InstallError; only the pipeline turns it
into a terminal progress event. Size disagreements on already-present files
are not errors: they are handled by re-downloading.
"""

from __future__ import annotations


class InstallError(Exception):
    """Base exception for installation failures."""


class FileSystemError(InstallError):
    """Raised on filesystem create/open/read/write/permission failures."""


class NetworkError(InstallError):
    """Raised on transport, connect or transfer failures."""


class ParseError(InstallError):
    """Raised when a remote or cached document is malformed."""


class ManifestIncompleteError(InstallError):
    """Raised when a manifest lacks a field the installation needs."""


class InheritanceError(ManifestIncompleteError):
    """Raised on a parent id mismatch or an inheritance cycle."""


class PlatformUnsupportedError(InstallError):
    """Raised when the running platform cannot perform an operation."""


class IntegrityMismatchError(InstallError):
    """Raised when downloaded content does not match its declared hash.

    Attributes:
        url: Source URL of the content.
        expected: Declared SHA-1 hex digest.
        actual: Computed SHA-1 hex digest.
    """

    def __init__(self, url: str, expected: str, actual: str) -> None:
        self.url = url
        self.expected = expected
        self.actual = actual
        super().__init__(f"SHA1 mismatch for {url}: expected {expected}, got {actual}")
