"""
STL format detection and file-level reading/writing.

Format detection looks at the first 6 bytes only: ``b"solid "`` means
ASCII STL, anything else is treated as binary. A binary file whose header
happens to start with ``solid `` is therefore classified as ASCII; this is
a property of the format, kept for compatibility with other tools.

ASCII STL is recognised but not parsed.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from meshful.errors import ASCIINotSupportedError, UnexpectedEOFError
from meshful.geometry.mesh import Mesh
from meshful.io.stl_binary import (
    ASCII_MARKER,
    HEADER_SIZE,
    decode_binary,
    encode_binary,
    extract_header_text,
    read_exact,
)
from meshful.logging_config import log_timing

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class STLFormat(Enum):
    """STL file format type."""
    BINARY = "binary"
    ASCII = "ascii"


@dataclass
class STLInfo:
    """Metadata about a loaded STL file."""
    filepath: str
    format: STLFormat
    file_size_bytes: int
    n_triangles: int
    header_text: str = ""

    @property
    def file_size_kb(self) -> float:
        """File size in kilobytes."""
        return self.file_size_bytes / 1024


def sniff_format(stream) -> Tuple[STLFormat, bytes]:
    """Detect STL format from the first 6 bytes of a stream.

    Returns:
        Tuple of (format, consumed bytes). The consumed bytes must be
        handed to the binary decoder as its header prefix.

    Raises:
        UnexpectedEOFError: stream holds fewer than 6 bytes
        TransportError: the stream failed
    """
    first6 = read_exact(stream, len(ASCII_MARKER))
    if len(first6) < len(ASCII_MARKER):
        raise UnexpectedEOFError(len(first6))

    if first6 == ASCII_MARKER:
        return STLFormat.ASCII, first6
    return STLFormat.BINARY, first6


def read_stl(stream, strict: bool = False) -> Mesh:
    """Read an STL stream positioned at its first byte.

    Raises:
        ASCIINotSupportedError: stream is ASCII STL
        UnexpectedEOFError, IncompleteHeaderError, MalformedRecordError,
        TransportError: see ``decode_binary``
    """
    stl_format, first6 = sniff_format(stream)
    if stl_format is STLFormat.ASCII:
        raise ASCIINotSupportedError("ASCII STL is not supported")
    return decode_binary(stream, prefix=first6, strict=strict)


def write_stl(stream, mesh: Mesh, header: Optional[Union[str, bytes]] = None) -> int:
    """Write a mesh as binary STL. Returns the number of bytes written."""
    return encode_binary(mesh, stream, header=header)


def read_stl_file(filepath: PathLike, strict: bool = False) -> Mesh:
    """Open a file and read it with ``read_stl``.

    Raises:
        FileNotFoundError: file does not exist
    """
    mesh, _ = read_stl_file_with_info(filepath, strict=strict)
    return mesh


def read_stl_file_with_info(filepath: PathLike, strict: bool = False) -> Tuple[Mesh, STLInfo]:
    """Read an STL file and return the mesh with file metadata."""
    filepath = str(filepath)
    file_size = os.path.getsize(filepath)

    with log_timing(logger, "Reading STL", path=filepath):
        with open(filepath, 'rb') as f:
            stl_format, first6 = sniff_format(f)
            if stl_format is STLFormat.ASCII:
                raise ASCIINotSupportedError(f"ASCII STL is not supported: {filepath!r}")
            mesh = decode_binary(f, prefix=first6, strict=strict)
            f.seek(0)
            header = f.read(HEADER_SIZE)

    info = STLInfo(
        filepath=filepath,
        format=stl_format,
        file_size_bytes=file_size,
        n_triangles=len(mesh),
        header_text=extract_header_text(header),
    )
    logger.info("Loaded %s: %d triangles (%.1f KB)",
                filepath, info.n_triangles, info.file_size_kb)
    return mesh, info


def write_stl_file(
    filepath: PathLike,
    mesh: Mesh,
    header: Optional[Union[str, bytes]] = None,
) -> int:
    """Write a mesh to a binary STL file. Returns the number of bytes written."""
    filepath = str(filepath)
    with log_timing(logger, "Writing STL", path=filepath):
        with open(filepath, 'wb') as f:
            n_bytes = write_stl(f, mesh, header=header)
    logger.info("Saved %s: %d triangles", filepath, len(mesh))
    return n_bytes
