"""
JobGraph schema - the runnable job descriptor and the values stamped onto it.

The loaded program decides the graph's name and shape. The entrypoint then
stamps the identity fields (job id, savepoint settings, classpaths,
parallelism) onto the returned graph.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class JobID:
    """
    Opaque 16-byte job identifier.

    Rendered as 32 lowercase hex characters, which is also the accepted
    input format of from_hex().
    """
    value: bytes

    SIZE = 16

    def __post_init__(self):
        if not isinstance(self.value, bytes) or len(self.value) != self.SIZE:
            raise ValueError(f"JobID must be exactly {self.SIZE} bytes")

    @classmethod
    def generate(cls) -> "JobID":
        return cls(os.urandom(cls.SIZE))

    @classmethod
    def zero(cls) -> "JobID":
        """The fixed job id used by standalone job containers."""
        return cls(bytes(cls.SIZE))

    @classmethod
    def from_hex(cls, text: str) -> "JobID":
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid JobID {text!r}: not a hex string") from e
        if len(raw) != cls.SIZE:
            raise ValueError(
                f"Invalid JobID {text!r}: expected {cls.SIZE * 2} hex characters"
            )
        return cls(raw)

    def to_hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return self.to_hex()


@dataclass(frozen=True)
class SavepointRestoreSettings:
    """
    Whether and where to resume prior persisted state from.

    Use none() for a fresh start, or for_path() to restore from a savepoint.
    allow_non_restored_state lets the restore skip state that no longer maps
    to an operator of the new graph.
    """
    restore_path: Optional[str] = None
    allow_non_restored_state: bool = False

    def __post_init__(self):
        if self.restore_path is None and self.allow_non_restored_state:
            raise ValueError("allow_non_restored_state requires a restore_path")

    @classmethod
    def none(cls) -> "SavepointRestoreSettings":
        return cls()

    @classmethod
    def for_path(
        cls, path: str, allow_non_restored_state: bool = False
    ) -> "SavepointRestoreSettings":
        if not path:
            raise ValueError("Savepoint restore path must not be empty")
        return cls(restore_path=path, allow_non_restored_state=allow_non_restored_state)

    def restore_savepoint(self) -> bool:
        return self.restore_path is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "restore_path": self.restore_path,
            "allow_non_restored_state": self.allow_non_restored_state,
        }


@dataclass(frozen=True)
class JobGraph:
    """
    Resolved, ready-to-execute job descriptor.

    Attributes:
        name: Job name chosen by the program
        job_id: Identifier stamped by the entrypoint
        maximum_parallelism: Upper bound on parallel instances, None if unset
        classpaths: Extra code locations as file: URLs, in scan order
        savepoint_restore_settings: Where to resume state from
    """
    name: str
    job_id: Optional[JobID] = None
    maximum_parallelism: Optional[int] = None
    classpaths: tuple[str, ...] = ()
    savepoint_restore_settings: SavepointRestoreSettings = field(
        default_factory=SavepointRestoreSettings.none
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict."""
        return {
            "job_id": self.job_id.to_hex() if self.job_id is not None else None,
            "name": self.name,
            "maximum_parallelism": self.maximum_parallelism,
            "classpaths": list(self.classpaths),
            "savepoint_restore_settings": self.savepoint_restore_settings.to_dict(),
        }
