"""
Program loading and invocation.

A job program is any callable that takes the program arguments and returns
a handle with a build(configuration) method:

    class WordCount:
        def __init__(self, args: list[str]): ...
        def build(self, configuration) -> JobGraph: ...

Class names are dotted import paths (wordcount.job.WordCount) or entry
point style references (wordcount.job:WordCount).

Loaders:
- ClassPathEntryPointLoader: imports from the process path plus the job's
  classpath. Jars are zip archives and are imported through zipimport.
- RegistryEntryPointLoader: explicit registry, falling back to installed
  jobjar.programs entry points. For environments where the program is
  installed rather than shipped as a jar.

Error handling contract:
- Missing class, or an object that does not satisfy the contract:
  EntryClassNotFound
- Exceptions raised by the program itself: ProgramInvocationError,
  chained to the original exception
"""

import importlib
import logging
import os
import sys
from abc import ABC, abstractmethod
from contextlib import contextmanager
from importlib.metadata import entry_points
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, Optional, Sequence

from jobjar.classpath.assembler import url_to_path
from jobjar.config import Configuration
from jobjar.errors import EntryClassNotFound, JobJarError, ProgramInvocationError
from jobjar.schemas import JobGraph

logger = logging.getLogger(__name__)

# Type alias for program factories: program arguments -> handle with build()
ProgramFactory = Callable[[list[str]], Any]

PROGRAM_ENTRY_POINT_GROUP = "jobjar.programs"


def _entry_to_path(entry: Path | str) -> str:
    """Classpath entries are paths or file: URLs; return an absolute path."""
    if isinstance(entry, str) and entry.startswith("file:"):
        entry = url_to_path(entry)
    return os.path.abspath(os.fspath(entry))


def _split_class_name(class_name: str) -> tuple[Optional[str], str]:
    if ":" in class_name:
        module_name, _, qualname = class_name.partition(":")
        return module_name, qualname
    return None, class_name


def _resolve_attribute(obj: Any, qualname: str) -> Any:
    for part in qualname.split("."):
        obj = getattr(obj, part)
    return obj


def _is_missing_module(error: ModuleNotFoundError, module_name: str) -> bool:
    """True when error reports module_name itself (or a parent) as missing."""
    missing = error.name or ""
    return module_name == missing or module_name.startswith(missing + ".")


class EntryPointLoader(ABC):
    """Loads a program factory by class name."""

    @contextmanager
    def activate(self, entries: Sequence[Path | str]) -> Iterator[None]:
        """Make the given code locations visible for the duration of the block."""
        yield

    @abstractmethod
    def load(self, class_name: str) -> ProgramFactory:
        """
        Load a program factory.

        Raises:
            EntryClassNotFound: If no such class can be found
        """
        ...


class ClassPathEntryPointLoader(EntryPointLoader):
    """
    Imports programs from sys.path plus the activated classpath entries.

    activate() prepends the entries to sys.path and, on exit, restores
    sys.path and evicts every module that was imported from those entries.
    Each resolution therefore sees a fresh snapshot of the jars.
    """

    @contextmanager
    def activate(self, entries: Sequence[Path | str]) -> Iterator[None]:
        paths = [_entry_to_path(e) for e in entries]
        saved_path = list(sys.path)
        saved_modules = set(sys.modules)

        sys.path[:0] = paths
        importlib.invalidate_caches()
        logger.debug(f"Activated {len(paths)} classpath entries")
        try:
            yield
        finally:
            sys.path[:] = saved_path
            self._evict_modules(saved_modules, paths)
            for path in paths:
                sys.path_importer_cache.pop(path, None)

    @staticmethod
    def _evict_modules(saved_modules: set[str], paths: list[str]) -> None:
        prefixes = tuple(os.path.join(p, "") for p in paths)
        for name in set(sys.modules) - saved_modules:
            module = sys.modules.get(name)
            origin = getattr(module, "__file__", None) or ""
            if origin.startswith(prefixes):
                del sys.modules[name]

    def load(self, class_name: str) -> ProgramFactory:
        module_name, qualname = _split_class_name(class_name)
        if module_name is not None:
            module = self._import(class_name, module_name)
            if module is None:
                raise EntryClassNotFound(class_name, "on the class path")
            return self._attribute(class_name, module, qualname)

        # Dotted name: find the longest importable module prefix
        parts = class_name.split(".")
        for i in range(len(parts) - 1, 0, -1):
            module = self._import(class_name, ".".join(parts[:i]))
            if module is not None:
                return self._attribute(class_name, module, ".".join(parts[i:]))
        raise EntryClassNotFound(class_name, "on the class path")

    @staticmethod
    def _import(class_name: str, module_name: str) -> Any:
        try:
            return importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            if _is_missing_module(e, module_name):
                return None
            raise ProgramInvocationError(
                f"Failed to load job class {class_name}: {e}"
            ) from e
        except ImportError as e:
            raise ProgramInvocationError(
                f"Failed to load job class {class_name}: {e}"
            ) from e
        except Exception as e:
            raise ProgramInvocationError(
                f"Failed to initialize module {module_name} of job class {class_name}: {e}"
            ) from e

    @staticmethod
    def _attribute(class_name: str, module: Any, qualname: str) -> ProgramFactory:
        try:
            return _resolve_attribute(module, qualname)
        except AttributeError as e:
            raise EntryClassNotFound(class_name, "on the class path") from e


class RegistryEntryPointLoader(EntryPointLoader):
    """
    Loads programs from an explicit registry or installed entry points.

    Usage:
        loader = RegistryEntryPointLoader()
        loader.register("wordcount", WordCount)

    Entry points of the jobjar.programs group match either by name or by
    their object reference (module:attr).
    """

    def __init__(self, programs: Optional[dict[str, ProgramFactory]] = None):
        self._programs: dict[str, ProgramFactory] = dict(programs or {})

    def register(self, name: str, factory: ProgramFactory) -> None:
        """Register a program factory by name. Primarily for testing."""
        self._programs[name] = factory

    def load(self, class_name: str) -> ProgramFactory:
        if class_name in self._programs:
            return self._programs[class_name]

        for ep in entry_points().select(group=PROGRAM_ENTRY_POINT_GROUP):
            if class_name in (ep.name, ep.value):
                try:
                    return ep.load()
                except Exception as e:
                    raise ProgramInvocationError(
                        f"Failed to load entry point {ep.name} ({ep.value}): {e}"
                    ) from e

        raise EntryClassNotFound(class_name, "in the program registry")


class ProgramInvoker:
    """
    Loads the entry class and runs its two-step program contract.

    Loading, construction from arguments and build from configuration all
    happen inside one loader activation, so code the program imports
    lazily during build() still resolves against the job's classpath.
    """

    def __init__(self, loader: Optional[EntryPointLoader] = None):
        self.loader = loader if loader is not None else ClassPathEntryPointLoader()

    def invoke(
        self,
        class_name: str,
        program_arguments: Iterable[str],
        entries: Sequence[Path | str],
        configuration: Configuration,
        library_directory: Optional[Path] = None,
    ) -> JobGraph:
        """
        Load class_name, construct it from program_arguments and build it.

        Args:
            class_name: Entry class to load
            program_arguments: Passed verbatim to the program factory
            entries: Code locations to activate (active jars plus classpath)
            configuration: Passed to the handle's build()
            library_directory: Only used to word error messages

        Returns:
            The JobGraph built by the program

        Raises:
            EntryClassNotFound: Class missing or contract not satisfied
            ProgramInvocationError: The program raised or built a non-JobGraph
        """
        with self.loader.activate(entries):
            try:
                factory = self.loader.load(class_name)
            except EntryClassNotFound as e:
                if library_directory is None:
                    raise
                raise EntryClassNotFound(
                    class_name, f"in the user lib directory ({library_directory})"
                ) from e
            logger.debug(f"Loaded job class {class_name}", extra={"state": "ProgramLoaded"})

            if not callable(factory):
                raise EntryClassNotFound(
                    class_name, "on the class path", "The object is not callable."
                )

            handle = self._call(class_name, "construct", factory, list(program_arguments))
            build = getattr(handle, "build", None)
            if not callable(build):
                raise EntryClassNotFound(
                    class_name,
                    "on the class path",
                    "The program does not provide build(configuration).",
                )

            job_graph = self._call(class_name, "build", build, configuration)

        if not isinstance(job_graph, JobGraph):
            raise ProgramInvocationError(
                f"Job class {class_name} built {type(job_graph).__name__}, expected JobGraph"
            )
        return job_graph

    @staticmethod
    def _call(class_name: str, step: str, fn: Callable, argument: Any) -> Any:
        try:
            return fn(argument)
        except JobJarError:
            raise
        except Exception as e:
            raise ProgramInvocationError(
                f"Job class {class_name} failed to {step}: {e}"
            ) from e
