"""Non-recursive, deterministically ordered directory scans."""

from pathlib import Path

from jobjar.errors import ArtifactIOError

JAR_SUFFIX = ".jar"


def scan_directory(directory: Path) -> list[Path]:
    """
    List the regular files directly inside a directory.

    Subdirectories are skipped, not descended into. Files are sorted by
    name so that resolution is reproducible on an unchanged snapshot.

    Args:
        directory: Directory to scan

    Returns:
        Regular files in lexical name order

    Raises:
        ArtifactIOError: If the directory does not exist or cannot be read
    """
    directory = Path(directory)
    if not directory.exists():
        raise ArtifactIOError(f"Directory does not exist: {directory}")
    if not directory.is_dir():
        raise ArtifactIOError(f"Not a directory: {directory}")

    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise ArtifactIOError(f"Failed to list directory {directory}: {e}") from e

    return sorted((p for p in entries if p.is_file()), key=lambda p: p.name)


def is_jar_file(path: Path) -> bool:
    return path.suffix == JAR_SUFFIX


def list_jar_files(directory: Path) -> list[Path]:
    """scan_directory() restricted to *.jar files."""
    return [p for p in scan_directory(directory) if is_jar_file(p)]
