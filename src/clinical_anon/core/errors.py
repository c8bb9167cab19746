"""
Pipeline errors. Every failure is fatal for the run and propagated unchanged.
"""


class PipelineError(Exception):
    """Base class for run-aborting failures."""


class LoadError(PipelineError):
    """A hierarchy or input resource could not be read or has the wrong shape."""


class SchemaError(PipelineError):
    """A raw row does not conform to the declared column types."""


class WriteError(PipelineError):
    """The destination could not be written."""
