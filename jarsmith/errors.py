"""Exceptions raised by jarsmith.

Every failure aborts the whole build. The CLI turns these into a non-zero
exit with the message; library callers can catch ``JarsmithError``.
"""

from __future__ import annotations


class JarsmithError(RuntimeError):
    """Base class for build failures."""


class ConfigurationError(JarsmithError):
    """The workspace description is invalid or evaluated out of order."""


class DependencyResolutionError(JarsmithError):
    """A declared coordinate was not found in any registered repository."""


class MissingResourceError(JarsmithError):
    """A resource required by the build (e.g. a template) does not exist."""


class TaskExecutionError(JarsmithError):
    """An external tool invoked by a task exited with an error."""


class RelocationError(JarsmithError):
    """A class file could not be rewritten for relocation."""


class CycleError(JarsmithError):
    """The task graph contains a dependency cycle."""
