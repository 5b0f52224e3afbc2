"""
ClassPathJobGraphRetriever - turns a ResolutionRequest into a JobGraph.

Execution flow (strictly linear, no retries):
1. Read the active jars from the request's JarSource
2. Resolve the entry point (explicit name or manifest scan)
3. Assemble the user classpath from the library directory
4. Load the entry class against active jars plus classpath
5. Construct the program from its arguments and build the JobGraph
6. Stamp job id, savepoint settings, classpaths and parallelism

States: Start -> JarsResolved -> EntryPointResolved -> ClasspathAssembled
-> ProgramLoaded -> Built -> Success. Any failure raises out of the step it
occurs in; no partial JobGraph is returned.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from jobjar.classpath.assembler import assemble_classpath, url_to_path
from jobjar.config import DEFAULT_PARALLELISM, Configuration
from jobjar.entry_point import EntryPointResolver
from jobjar.errors import JobJarError
from jobjar.program import EntryPointLoader, ProgramInvoker
from jobjar.schemas import JobGraph, JobID, ResolutionRequest, SavepointRestoreSettings

logger = logging.getLogger(__name__)


class ClassPathJobGraphRetriever:
    """
    Retrieves the JobGraph of a job whose code ships on the classpath.

    Usage:
        request = ResolutionRequest(
            job_id=JobID.generate(),
            savepoint_restore_settings=SavepointRestoreSettings.none(),
            program_arguments=("--input", "/data"),
            library_directory=Path("usrlib"),
        )
        job_graph = ClassPathJobGraphRetriever(request).retrieve_job_graph(configuration)
    """

    def __init__(
        self,
        request: ResolutionRequest,
        loader: Optional[EntryPointLoader] = None,
        working_directory: Optional[Path] = None,
    ):
        self.request = request
        self.working_directory = working_directory
        self._resolver = EntryPointResolver()
        self._invoker = ProgramInvoker(loader)

    @classmethod
    def create(
        cls,
        job_id: JobID,
        savepoint_restore_settings: SavepointRestoreSettings,
        program_arguments: Sequence[str] = (),
        loader: Optional[EntryPointLoader] = None,
        working_directory: Optional[Path] = None,
        **options: Any,
    ) -> "ClassPathJobGraphRetriever":
        """Build the request and the retriever in one call. options go to ResolutionRequest."""
        request = ResolutionRequest(
            job_id=job_id,
            savepoint_restore_settings=savepoint_restore_settings,
            program_arguments=tuple(program_arguments),
            **options,
        )
        return cls(request, loader=loader, working_directory=working_directory)

    def retrieve_job_graph(self, configuration: Optional[Configuration] = None) -> JobGraph:
        """
        Resolve, load and build the job.

        Args:
            configuration: Passed to the program's build(); parallelism.default
                is stamped as the maximum parallelism when present

        Returns:
            The stamped JobGraph

        Raises:
            EntryPointNotFound: No explicit class and no job jar found
            AmbiguousEntryPoint: No explicit class and several job jars found
            EntryClassNotFound: The class cannot be loaded
            ProgramInvocationError: The program failed to construct or build
            ArtifactIOError: A directory or manifest cannot be read
        """
        request = self.request
        configuration = configuration if configuration is not None else Configuration()
        working_directory = self.working_directory or Path.cwd()

        active_jars = self._active_jars()
        self._transition("JarsResolved", f"{len(active_jars)} active jar(s)")

        entry_point = self._resolver.resolve(
            request.entry_class_name, request.library_directory, active_jars
        )
        self._transition("EntryPointResolved", entry_point.class_name)

        classpath = assemble_classpath(
            request.library_directory, active_jars, working_directory
        )
        self._transition("ClasspathAssembled", f"{len(classpath)} classpath entries")

        job_graph = self._invoker.invoke(
            entry_point.class_name,
            request.program_arguments,
            [*active_jars, *(working_directory / url_to_path(url) for url in classpath)],
            configuration,
            library_directory=request.library_directory,
        )
        self._transition("Built", job_graph.name)

        stamped = dataclasses.replace(
            job_graph,
            job_id=request.job_id,
            savepoint_restore_settings=request.savepoint_restore_settings,
            classpaths=classpath,
            maximum_parallelism=configuration.get_integer(
                DEFAULT_PARALLELISM, job_graph.maximum_parallelism
            ),
        )
        self._transition("Success", str(request.job_id))
        logger.info(
            f"Retrieved job graph {stamped.name} ({stamped.job_id})",
            extra={"job_id": str(stamped.job_id)},
        )
        return stamped

    def _active_jars(self) -> list[Path]:
        """An explicit entry class does not need the jar source, so its failure is tolerated."""
        request = self.request
        try:
            return list(request.jar_source.get())
        except (OSError, JobJarError) as e:
            if request.entry_class_name is None:
                raise
            logger.warning(
                f"Could not read active jars, continuing with explicit class "
                f"{request.entry_class_name}: {e}"
            )
            return []

    def _transition(self, state: str, detail: str) -> None:
        logger.debug(f"{state}: {detail}", extra={"state": state})
