"""
EntryPointResolver - decides the single class a container executes.

Resolution order:
1. An explicit class name always wins; no manifest is read for naming
2. Otherwise the user library directory is scanned for jars (minus jars
   already active) and exactly one must declare an entry class in its
   manifest
3. Without a library directory, the active jars themselves are scanned

Zero declaring jars raises EntryPointNotFound, more than one raises
AmbiguousEntryPoint. The resolver never picks one of several silently.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from jobjar.errors import AmbiguousEntryPoint, EntryPointNotFound
from jobjar.schemas import CandidateJar, ResolvedEntryPoint
from jobjar.classpath.assembler import exclude_active
from jobjar.classpath.manifest import read_candidate
from jobjar.classpath.scanner import is_jar_file, list_jar_files

logger = logging.getLogger(__name__)


class EntryPointResolver:
    """Resolves the entry point of a job from a name or from jar manifests."""

    def resolve(
        self,
        explicit_name: Optional[str],
        library_directory: Optional[Path],
        active_jars: Iterable[Path],
    ) -> ResolvedEntryPoint:
        """
        Resolve the entry point.

        Args:
            explicit_name: Job class name given by the user, if any
            library_directory: Directory of user jars, or None
            active_jars: Jars already on the process classpath

        Returns:
            ResolvedEntryPoint; source_jar is set only when discovered

        Raises:
            EntryPointNotFound: No candidate jar declares an entry class
            AmbiguousEntryPoint: Several candidate jars declare one
            ArtifactIOError: The directory or a manifest cannot be read
        """
        if explicit_name:
            logger.info(f"Using explicitly configured job class {explicit_name}")
            return ResolvedEntryPoint(class_name=explicit_name)

        active_jars = list(active_jars)
        if library_directory is None:
            logger.info("Scanning system class path for job JAR")
            jars = [p for p in active_jars if is_jar_file(p) and p.is_file()]
        else:
            logger.info(f"Scanning user lib directory {library_directory} for job JAR")
            jars = exclude_active(list_jar_files(library_directory), active_jars)

        job_jar = self._find_only_entry_class([read_candidate(jar) for jar in jars])
        logger.info(f"Using {job_jar.path} as job jar (entry class {job_jar.entry_class})")
        return ResolvedEntryPoint(class_name=job_jar.entry_class, source_jar=job_jar.path)

    @staticmethod
    def _find_only_entry_class(candidates: list[CandidateJar]) -> CandidateJar:
        with_entry = [c for c in candidates if c.has_entry_class]
        if not with_entry:
            raise EntryPointNotFound(
                f"no manifest entry class among {len(candidates)} candidate JAR(s)"
            )
        if len(with_entry) > 1:
            raise AmbiguousEntryPoint([c.path for c in with_entry])
        return with_entry[0]
