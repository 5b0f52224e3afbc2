"""
jobjar - Container entrypoint job resolution

Decides which program a container runs and which jars it needs on its
classpath, then builds the job's JobGraph.
"""

__version__ = "0.1.0"


__all__ = [
    "ClassPathJobGraphRetriever",
    "Configuration",
    "JobGraph",
    "JobID",
    "ResolutionRequest",
    "SavepointRestoreSettings",
    "load_configuration",
]

from .config import Configuration, load_configuration
from .schemas import JobGraph, JobID, ResolutionRequest, SavepointRestoreSettings
from .retriever import ClassPathJobGraphRetriever
