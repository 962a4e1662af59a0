"""
Configuration serialization for PolyImage.

Only the polynomial order and window size are written: two little-endian
signed 64-bit integers, in that order, with no version header. The fit
operator is rederived on load and extracted features are never persisted.
The downsampling rate is a property of the receiving instance.
"""

import logging
import struct
from typing import BinaryIO, Optional

from polyimage.core import PolyImage
from polyimage.errors import CorruptData, PolyImageError

logger = logging.getLogger(__name__)

_LAYOUT = struct.Struct("<qq")
RECORD_SIZE = _LAYOUT.size


def serialize(item: PolyImage) -> bytes:
    """Encode the configuration of a PolyImage."""
    return _LAYOUT.pack(item.order, item.window_size)


def deserialize(data: bytes, item: Optional[PolyImage] = None) -> PolyImage:
    """
    Decode a configuration produced by serialize().

    Args:
        data: Serialized bytes
        item: Optional instance to reconfigure in place; a new default
            instance is created when omitted

    Returns:
        The configured instance, with no features loaded

    Raises:
        CorruptData: On a wrong length or an invalid configuration; `item`
            is left unchanged
    """
    try:
        data = bytes(data)
    except TypeError:
        raise CorruptData(f"Expected bytes, got {type(data).__name__}") from None

    if len(data) != RECORD_SIZE:
        raise CorruptData(f"Expected {RECORD_SIZE} bytes, got {len(data)}")

    order, window_size = _LAYOUT.unpack(data)
    target = item if item is not None else PolyImage()
    try:
        target.setup(order, window_size)
    except PolyImageError as e:
        logger.warning(f"deserialize rejected | order={order} window_size={window_size}")
        raise CorruptData(f"Invalid serialized configuration: {e}") from e

    return target


def serialize_to(item: PolyImage, stream: BinaryIO):
    """Write the configuration of a PolyImage to a binary stream."""
    stream.write(serialize(item))


def deserialize_from(stream: BinaryIO, item: Optional[PolyImage] = None) -> PolyImage:
    """Read one configuration record from a binary stream."""
    data = stream.read(RECORD_SIZE)
    if len(data) < RECORD_SIZE:
        raise CorruptData(f"Unexpected end of stream after {len(data)} bytes")
    return deserialize(data, item)
