"""
Classpath assembly - the extra code locations attached to a job.

The assembled classpath is the jars of the user library directory, minus
jars already active on the process classpath, expressed relative to the
working directory where possible and rendered as file: URLs. It does not
depend on how the entry point was resolved: the job's own jar is listed
alongside its library jars.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from .scanner import list_jar_files

logger = logging.getLogger(__name__)

URL_SCHEME = "file:"


def relativize_path(base: Path, path: Path) -> Path:
    """
    Express path relative to base when it is a descendant of base.

    Paths outside base are returned absolute.
    """
    absolute = Path(path).absolute()
    try:
        return absolute.relative_to(Path(base).absolute())
    except ValueError:
        return absolute


def to_url(path: Path) -> str:
    """Render a path as a file: URL (file:lib/a.jar, file:/opt/lib/a.jar)."""
    return URL_SCHEME + Path(path).as_posix()


def url_to_path(url: str) -> Path:
    if not url.startswith(URL_SCHEME):
        raise ValueError(f"Not a file URL: {url}")
    return Path(url[len(URL_SCHEME):])


def normalize_path(path: Path) -> Path:
    """Normalize a path for equality checks between jar lists."""
    return Path(path).resolve()


def exclude_active(jars: Iterable[Path], active_jars: Iterable[Path]) -> list[Path]:
    """Drop every jar that is already reported active, keeping order."""
    active = {normalize_path(p) for p in active_jars}
    return [jar for jar in jars if normalize_path(jar) not in active]


def assemble_classpath(
    library_directory: Optional[Path],
    active_jars: Iterable[Path],
    working_directory: Optional[Path] = None,
) -> tuple[str, ...]:
    """
    Compute the ordered, deduplicated classpath URLs for a job.

    Args:
        library_directory: Directory of user jars, None for no user jars
        active_jars: Jars already on the process classpath, never repeated
        working_directory: Base for relative URLs, defaults to the cwd

    Returns:
        Tuple of file: URLs in directory scan order

    Raises:
        ArtifactIOError: If library_directory cannot be scanned
    """
    if library_directory is None:
        return ()

    base = Path(working_directory) if working_directory is not None else Path.cwd()
    jars = exclude_active(list_jar_files(library_directory), active_jars)

    urls: dict[str, None] = {}
    for jar in jars:
        urls.setdefault(to_url(relativize_path(base, jar)), None)

    logger.debug(f"Assembled {len(urls)} classpath entries from {library_directory}")
    return tuple(urls)
