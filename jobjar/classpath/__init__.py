"""
Classpath discovery: active jars, library directory scans, jar manifests
and classpath assembly.
"""

from .assembler import assemble_classpath, relativize_path, to_url, url_to_path
from .jar_source import ClassPathJarSource, JarSource, StaticJarSource
from .manifest import find_entry_class, read_candidate, read_manifest
from .scanner import list_jar_files, scan_directory

__all__ = [
    "ClassPathJarSource",
    "JarSource",
    "StaticJarSource",
    "assemble_classpath",
    "find_entry_class",
    "list_jar_files",
    "read_candidate",
    "read_manifest",
    "relativize_path",
    "scan_directory",
    "to_url",
    "url_to_path",
]
