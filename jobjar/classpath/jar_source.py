"""
JarSource - the jars already active on the running process's classpath.

Production code reads a path-separator delimited variable from the
environment. Tests and embedding callers supply literal lists through
StaticJarSource.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

CLASSPATH_VARIABLE = "CLASSPATH"


class JarSource(ABC):
    """Reports the jars that are already active, in encounter order."""

    @abstractmethod
    def get(self) -> list[Path]:
        """Return active jar paths. Order is preserved, duplicates are kept."""
        ...


class ClassPathJarSource(JarSource):
    """
    Parses the active classpath out of an environment variable.

    The variable is read on every get() call, so each resolution sees a
    fresh value. Empty segments and segments that are not existing regular
    files (directories included) are dropped silently. The shell scripts
    that prepare a classpath often produce such entries.
    """

    def __init__(
        self,
        variable: str = CLASSPATH_VARIABLE,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.variable = variable
        self._environ = environ

    def get(self) -> list[Path]:
        environ = os.environ if self._environ is None else self._environ
        class_path = environ.get(self.variable) or ""
        return parse_class_path(class_path)

    def __repr__(self) -> str:
        return f"ClassPathJarSource(variable={self.variable!r})"


class StaticJarSource(JarSource):
    """Returns a fixed list of jars, unfiltered."""

    def __init__(self, paths: Iterable[Path | str] = ()):
        self._paths = [Path(p) for p in paths]

    def get(self) -> list[Path]:
        return list(self._paths)

    def __repr__(self) -> str:
        return f"StaticJarSource({[str(p) for p in self._paths]!r})"


def parse_class_path(class_path: str, separator: str = os.pathsep) -> list[Path]:
    """
    Split a delimited class path into the regular files it names.

    Never raises: malformed or empty input yields an empty list.
    """
    jars: list[Path] = []
    for segment in class_path.split(separator):
        if not segment:
            continue
        path = Path(segment)
        try:
            is_file = path.is_file()
        except (OSError, ValueError):
            is_file = False
        if is_file:
            jars.append(path)
        else:
            logger.debug(f"Ignoring class path entry {segment}: not a regular file")
    return jars
