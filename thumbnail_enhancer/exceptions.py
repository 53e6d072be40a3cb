"""
Exceptions raised while processing a single resolution variant.

Every error raised inside a variant run is caught by the pipeline and recorded
in the manifest; none of them aborts a batch.
"""


class ProcessingError(Exception):
    """Base class for per-variant processing errors"""

    reason = 'processing failed'

    def __init__(self, message: str = None):
        super().__init__(message or self.reason)


class DecodeFailure(ProcessingError):
    """Source bytes could not be decoded into a pixel buffer"""

    reason = 'source image could not be decoded'


class DegenerateCrop(ProcessingError):
    """Border detection found the whole image dark"""

    reason = 'entire image is uniform, no content region found'


class AllocationFailure(ProcessingError):
    """A pixel buffer could not be allocated"""

    reason = 'pixel buffer could not be allocated'


class EncodeFailure(ProcessingError):
    """The codec collaborator could not encode the output buffer"""

    reason = 'output image could not be encoded'


class InvalidBufferError(ProcessingError, ValueError):
    """Dimensions and sample count of a pixel buffer disagree"""

    reason = 'pixel buffer dimensions do not match its samples'
