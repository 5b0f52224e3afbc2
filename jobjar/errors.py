"""
Error classes for jobjar resolution.

Every failure aborts the resolution pipeline at the step where it occurs:
- ConfigError: the request or configuration file is invalid
- ArtifactIOError: a library directory or jar manifest cannot be read
- EntryPointNotFound / AmbiguousEntryPoint: no single job jar could be found
- EntryClassNotFound: the named job class cannot be loaded
- ProgramInvocationError: the loaded program failed while building its graph

Error handling contract:
- Errors are exceptions, not values
- Nothing is retried and no partial JobGraph is ever returned
- The process entrypoint prints the message verbatim and exits non-zero,
  since operational tooling greps for these phrases
"""


class JobJarError(Exception):
    """Base exception for jobjar."""
    pass


class ConfigError(JobJarError):
    """Configuration validation error."""
    pass


class ArtifactIOError(JobJarError):
    """A directory or jar archive could not be read."""
    pass


class EntryPointResolutionError(JobJarError):
    """
    No single entry point could be discovered by scanning.

    Raised only when no explicit job class name was given.
    """
    pass


class EntryPointNotFound(EntryPointResolutionError):
    """No candidate jar declares an entry class."""

    def __init__(self, detail: str | None = None):
        message = (
            "Failed to find job JAR on class path. "
            "Please provide the job class name explicitly."
        )
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AmbiguousEntryPoint(EntryPointResolutionError):
    """More than one candidate jar declares an entry class."""

    def __init__(self, jars: list):
        self.jars = list(jars)
        listing = ", ".join(str(jar) for jar in self.jars)
        super().__init__(
            f"Multiple JAR archives with entry classes found on class path: [{listing}]. "
            "Please provide the job class name explicitly."
        )


class EntryClassNotFound(JobJarError):
    """The job class could not be loaded or does not satisfy the program contract."""

    def __init__(self, class_name: str, location: str, reason: str | None = None):
        self.class_name = class_name
        message = f"Could not find the provided job class ({class_name}) {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class ProgramInvocationError(JobJarError):
    """The loaded program raised while constructing or building its JobGraph."""
    pass
