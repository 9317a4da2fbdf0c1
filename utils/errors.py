"""Error types raised by the compression pipeline."""


class CompressionError(Exception):
    """Base class for all pipeline failures."""


class ValidationError(CompressionError, ValueError):
    """Rejected input: bad quality scalar, unsupported extension or parameter."""


class DecodeError(CompressionError):
    """Input image could not be read or decoded."""


class EncodeError(CompressionError):
    """Encoder failed to produce a bitstream."""


class OutputWriteError(CompressionError, OSError):
    """Final output file could not be written."""

    def __init__(self, path, reason):
        super().__init__(f"Failed to write image: {path} ({reason})")
        self.path = path
