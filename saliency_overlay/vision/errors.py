"""Exceptions raised by the saliency pipeline."""


class SaliencyError(RuntimeError):
    """Base class for failures that abort a single overlay request."""


class AllocationFailure(SaliencyError):
    """A pixel buffer could not be allocated."""


class ConversionFailure(SaliencyError):
    """An image could not be turned into analysis input."""


class AnalysisFailure(SaliencyError):
    """The saliency capability produced no usable result."""
