"""
Schemas for jobjar resolution.

- JobID, SavepointRestoreSettings, JobGraph: the runnable job descriptor
- CandidateJar, ResolvedEntryPoint, ResolutionRequest: resolution inputs
  and intermediate results
"""

from .job_graph import JobGraph, JobID, SavepointRestoreSettings
from .resolution import CandidateJar, ResolutionRequest, ResolvedEntryPoint

__all__ = [
    "CandidateJar",
    "JobGraph",
    "JobID",
    "ResolutionRequest",
    "ResolvedEntryPoint",
    "SavepointRestoreSettings",
]
