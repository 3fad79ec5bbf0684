"""
Exception hierarchy for meshful.

All library errors derive from MeshError so callers can catch one type at
the application boundary. Format-specific errors also derive from the
matching builtin (EOFError, ValueError, NotImplementedError) where that
reads naturally.
"""

from typing import Optional


class MeshError(Exception):
    """Base class for all meshful errors."""


class STLError(MeshError):
    """Error while reading or writing an STL stream."""


class IncompleteHeaderError(STLError):
    """Binary STL stream ended before the 84-byte header was complete."""

    def __init__(self, n_read: int):
        self.n_read = n_read
        super().__init__(
            f"Incomplete STL binary header: 84 bytes expected, got {n_read}"
        )


class UnexpectedEOFError(STLError, EOFError):
    """Stream ended inside a fixed-length record.

    Attributes:
        triangle_index: Index of the record being read, or None when the
            stream ended while sniffing the format.
        offset: Byte offset where the truncated record starts.
    """

    def __init__(self, offset: int, triangle_index: Optional[int] = None):
        self.offset = offset
        self.triangle_index = triangle_index
        if triangle_index is None:
            message = f"Unexpected end of file at byte {offset}"
        else:
            message = (
                f"Unexpected end of file while reading triangle no. "
                f"{triangle_index} at byte {offset}"
            )
        super().__init__(message)


class MalformedRecordError(STLError, ValueError):
    """Triangle record holds values rejected by strict decoding."""

    def __init__(self, triangle_index: int, offset: int, reason: str):
        self.triangle_index = triangle_index
        self.offset = offset
        self.reason = reason
        super().__init__(
            f"Malformed triangle no. {triangle_index} at byte {offset}: {reason}"
        )


class ASCIINotSupportedError(STLError, NotImplementedError):
    """Stream was sniffed as ASCII STL, which meshful does not parse."""


class TooManyTrianglesError(STLError, ValueError):
    """Mesh has more triangles than a binary STL count field can hold."""

    def __init__(self, n_triangles: int):
        self.n_triangles = n_triangles
        super().__init__(
            f"Cannot encode {n_triangles} triangles: binary STL holds at most "
            f"{0xFFFFFFFF}"
        )


class TransportError(MeshError):
    """Underlying stream failed with a non-EOF error.

    The original exception is available as ``__cause__``.
    """


class EmptyMeshError(MeshError, ValueError):
    """Operation needs at least one triangle."""


class OBJParseError(MeshError, ValueError):
    """Malformed line in an OBJ or MTL file."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"Line {line_number}: {message}")
