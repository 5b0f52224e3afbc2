"""
Resolution schemas - the request consumed by one resolution and its
intermediate results.

A ResolutionRequest is built once per container start, consumed by exactly
one retrieve_job_graph() call and then discarded.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from jobjar.errors import ConfigError
from .job_graph import JobID, SavepointRestoreSettings

if TYPE_CHECKING:
    from jobjar.classpath.jar_source import JarSource


@dataclass(frozen=True)
class CandidateJar:
    """
    A jar artifact and the entry class its manifest declares.

    entry_class is None for pure library artifacts, which are never
    candidates for entry point discovery.
    """
    path: Path
    entry_class: Optional[str] = None

    @property
    def has_entry_class(self) -> bool:
        return self.entry_class is not None


@dataclass(frozen=True)
class ResolvedEntryPoint:
    """
    The single class to execute.

    source_jar is only set when the class was discovered by scanning jar
    manifests, never when the name was given explicitly.
    """
    class_name: str
    source_jar: Optional[Path] = None


def _default_jar_source() -> "JarSource":
    from jobjar.classpath.jar_source import ClassPathJarSource
    return ClassPathJarSource()


def _default_library_directory() -> Optional[Path]:
    from jobjar.config import default_library_directory
    return default_library_directory()


@dataclass(frozen=True)
class ResolutionRequest:
    """
    Validated input of one job graph resolution.

    Attributes:
        job_id: Identifier stamped onto the resulting JobGraph (required)
        savepoint_restore_settings: Passed through unmodified (required)
        program_arguments: Handed verbatim to the loaded program
        entry_class_name: Explicit job class; takes precedence over scanning
        jar_source: Reports the jars already active on the classpath
        library_directory: Directory of user jars, scanned non-recursively.
            Defaults to usrlib/ under the working directory when it exists.
    """
    job_id: JobID
    savepoint_restore_settings: SavepointRestoreSettings
    program_arguments: tuple[str, ...] = ()
    entry_class_name: Optional[str] = None
    jar_source: "JarSource" = field(default_factory=_default_jar_source)
    library_directory: Optional[Path] = field(default_factory=_default_library_directory)

    def __post_init__(self):
        if self.job_id is None:
            raise ConfigError("job_id is required")
        if not isinstance(self.job_id, JobID):
            raise ConfigError(f"job_id must be a JobID, got {type(self.job_id).__name__}")
        if self.savepoint_restore_settings is None:
            raise ConfigError("savepoint_restore_settings is required")
        if not isinstance(self.savepoint_restore_settings, SavepointRestoreSettings):
            raise ConfigError(
                "savepoint_restore_settings must be a SavepointRestoreSettings, "
                f"got {type(self.savepoint_restore_settings).__name__}"
            )
        if self.jar_source is None:
            raise ConfigError("jar_source must not be None")
        if self.program_arguments is None or isinstance(self.program_arguments, str):
            raise ConfigError("program_arguments must be a sequence of strings")
        try:
            arguments = tuple(str(a) for a in self.program_arguments)
        except TypeError:
            raise ConfigError(
                "program_arguments must be a sequence of strings, "
                f"got {type(self.program_arguments).__name__}"
            )
        if self.entry_class_name is not None and not isinstance(self.entry_class_name, str):
            raise ConfigError(
                f"entry_class_name must be a string, got {type(self.entry_class_name).__name__}"
            )

        # Normalize to immutable types
        object.__setattr__(self, "program_arguments", arguments)
        if self.entry_class_name is not None:
            name = self.entry_class_name.strip()
            if not name:
                raise ConfigError("entry_class_name must not be blank")
            object.__setattr__(self, "entry_class_name", name)
        if self.library_directory is not None:
            object.__setattr__(self, "library_directory", Path(self.library_directory))
