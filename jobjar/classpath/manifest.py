"""
Jar manifest reading.

A jar is a zip archive that may carry META-INF/MANIFEST.MF. The main
section of the manifest may declare the entry class of a job:

    Manifest-Version: 1.0
    Program-Class: wordcount.job.WordCount

Program-Class takes precedence over Main-Class. A jar that declares
neither is a pure library artifact.
"""

import zipfile
from pathlib import Path
from typing import Optional

from jobjar.errors import ArtifactIOError
from jobjar.schemas import CandidateJar

MANIFEST_NAME = "META-INF/MANIFEST.MF"

PROGRAM_CLASS_ATTRIBUTE = "program-class"
MAIN_CLASS_ATTRIBUTE = "main-class"

# Checked in order, first non-blank value wins
ENTRY_CLASS_ATTRIBUTES = (PROGRAM_CLASS_ATTRIBUTE, MAIN_CLASS_ATTRIBUTE)


def parse_manifest(text: str) -> dict[str, str]:
    """
    Parse the main section of a manifest.

    Header names are lowercased. Lines starting with a single space continue
    the previous header's value. The main section ends at the first blank
    line; per-entry sections after it are ignored.

    Args:
        text: Manifest contents

    Returns:
        Dict of lowercased header name to value
    """
    attributes: dict[str, str] = {}
    current: Optional[str] = None

    for raw_line in text.splitlines():
        if not raw_line.strip():
            if attributes:
                break
            continue

        if raw_line.startswith(" "):
            if current is not None:
                attributes[current] += raw_line[1:]
            continue

        name, sep, value = raw_line.partition(":")
        if not sep:
            current = None
            continue
        current = name.strip().lower()
        attributes[current] = value.strip()

    return {name: value.strip() for name, value in attributes.items()}


def read_manifest(jar: Path) -> dict[str, str]:
    """
    Read the main manifest attributes of a jar.

    Returns:
        Parsed attributes, or an empty dict when the jar has no manifest

    Raises:
        ArtifactIOError: If the archive is missing, corrupt or unreadable
    """
    try:
        with zipfile.ZipFile(jar) as archive:
            try:
                raw = archive.read(MANIFEST_NAME)
            except KeyError:
                return {}
    except (zipfile.BadZipFile, OSError) as e:
        raise ArtifactIOError(f"Failed to read manifest of {jar}: {e}") from e

    return parse_manifest(raw.decode("utf-8", errors="replace"))


def find_entry_class(jar: Path) -> Optional[str]:
    """Return the entry class declared by a jar's manifest, if any."""
    attributes = read_manifest(jar)
    for attribute in ENTRY_CLASS_ATTRIBUTES:
        value = attributes.get(attribute)
        if value:
            return value
    return None


def read_candidate(jar: Path) -> CandidateJar:
    return CandidateJar(path=Path(jar), entry_class=find_entry_class(jar))
