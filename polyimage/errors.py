"""Exception types raised by polyimage."""


class PolyImageError(Exception):
    """Base class for all polyimage errors."""


class InvalidConfiguration(PolyImageError, ValueError):
    """Polynomial order, window size or downsampling rate out of range."""


class UnsupportedPixelFormat(PolyImageError, ValueError):
    """Image pixel type cannot be reduced to a single intensity channel."""


class SingularFit(PolyImageError, ArithmeticError):
    """Design matrix has no usable fit (empty, non-finite or rank 0)."""


class CorruptData(PolyImageError, ValueError):
    """Serialized configuration bytes are malformed."""
