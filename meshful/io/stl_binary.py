"""
Binary STL codec.

Layout (little-endian throughout):
    bytes 0..79   free-form header
    bytes 80..83  uint32 triangle count N
    N records of 50 bytes: normal, v0, v1, v2 (3 x float32 each), uint16 attribute

The record layout is expressed as a numpy structured dtype with the same
field names numpy-stl uses, so records can be viewed as arrays directly.
Decoding works on any object with ``read(n)``; encoding on any object with
``write(b)``. Buffers are local to each call.
"""

import io
import logging
from typing import Optional, Union

import numpy as np

from meshful.errors import (
    IncompleteHeaderError,
    MalformedRecordError,
    TooManyTrianglesError,
    TransportError,
    UnexpectedEOFError,
)
from meshful.geometry.mesh import Mesh
from meshful.geometry.triangle import RawAttribute, Triangle
from meshful.geometry.vec3 import Vec3

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
COUNT_SIZE = 4
PREAMBLE_SIZE = HEADER_SIZE + COUNT_SIZE
RECORD_SIZE = 50
MAX_TRIANGLES = 0xFFFFFFFF

ASCII_MARKER = b"solid "
DEFAULT_HEADER = "Exported by meshful"

STL_RECORD_DTYPE = np.dtype([
    ('normals', '<f4', (3,)),
    ('vectors', '<f4', (3, 3)),
    ('attr', '<u2'),
])


def read_exact(stream, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads.

    Returns fewer than ``size`` bytes only when the stream hits end of input.

    Raises:
        TransportError: if the stream fails, is closed, or has no data
            available yet (non-blocking stream returning None)
    """
    buf = bytearray()
    while len(buf) < size:
        try:
            chunk = stream.read(size - len(buf))
        except (OSError, ValueError) as exc:
            # ValueError: I/O operation on closed file
            raise TransportError(f"Read failed after {len(buf)} bytes: {exc}") from exc
        if chunk is None:
            raise TransportError(f"Stream returned no data after {len(buf)} bytes")
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


def _write_all(stream, data: bytes) -> None:
    view = memoryview(data)
    while view:
        try:
            written = stream.write(view)
        except (OSError, ValueError) as exc:
            raise TransportError(f"Write failed: {exc}") from exc
        # Raw streams may write less than asked; None or 0 means nothing was taken.
        if not written:
            raise TransportError(f"Stream accepted no data, {len(view)} bytes left")
        view = view[written:]


def make_header(text: Union[str, bytes] = DEFAULT_HEADER) -> bytes:
    """Encode header text into the fixed 80-byte field (zero padded).

    Raises:
        TypeError: if ``text`` is not str or bytes
        ValueError: if the header would be sniffed as ASCII STL
    """
    if isinstance(text, str):
        raw = text.encode('ascii')
    elif isinstance(text, (bytes, bytearray)):
        raw = bytes(text)
    else:
        raise TypeError(f"STL header must be str or bytes, not {type(text).__name__}")
    raw = raw[:HEADER_SIZE].ljust(HEADER_SIZE, b'\x00')
    if raw.startswith(ASCII_MARKER):
        raise ValueError("Binary STL header must not start with 'solid '")
    return raw


def extract_header_text(header: bytes) -> str:
    """ASCII text at the start of a header, up to NUL or a non-ASCII byte."""
    end = 0
    while end < len(header) and 0 < header[end] < 128:
        end += 1
    return header[:end].decode('ascii')


def decode_binary(stream, prefix: bytes = b"", strict: bool = False) -> Mesh:
    """Decode a binary STL stream into a Mesh.

    Args:
        stream: Object with ``read(n)`` positioned after ``prefix``
        prefix: Header bytes already consumed by the caller (format sniffing)
        strict: Reject non-finite floats instead of passing them through

    Returns:
        Mesh with the triangles in file order

    Raises:
        IncompleteHeaderError: fewer than 84 header bytes
        UnexpectedEOFError: stream ended inside a triangle record
        MalformedRecordError: strict mode found a non-finite value
        TransportError: the stream failed
    """
    if len(prefix) > PREAMBLE_SIZE:
        raise ValueError(f"Prefix longer than the {PREAMBLE_SIZE}-byte header")

    header = bytes(prefix) + read_exact(stream, PREAMBLE_SIZE - len(prefix))
    if len(header) < PREAMBLE_SIZE:
        raise IncompleteHeaderError(len(header))

    n_triangles = int(np.frombuffer(header, dtype='<u4', count=1, offset=HEADER_SIZE)[0])
    logger.debug("STL header %r, %d triangles",
                 extract_header_text(header[:HEADER_SIZE]), n_triangles)

    body = bytearray()
    for i in range(n_triangles):
        record = read_exact(stream, RECORD_SIZE)
        if len(record) < RECORD_SIZE:
            raise UnexpectedEOFError(PREAMBLE_SIZE + i * RECORD_SIZE, triangle_index=i)
        body += record

    records = np.frombuffer(bytes(body), dtype=STL_RECORD_DTYPE, count=n_triangles)

    if strict and n_triangles:
        finite = (np.isfinite(records['normals']).all(axis=1)
                  & np.isfinite(records['vectors']).all(axis=(1, 2)))
        if not finite.all():
            i = int(np.argmin(finite))
            raise MalformedRecordError(i, PREAMBLE_SIZE + i * RECORD_SIZE,
                                       "non-finite coordinate")

    triangles = []
    for normal, vectors, attr in zip(records['normals'].tolist(),
                                     records['vectors'].tolist(),
                                     records['attr'].tolist()):
        triangles.append(Triangle(
            vertices=(Vec3(*vectors[0]), Vec3(*vectors[1]), Vec3(*vectors[2])),
            normal=Vec3(*normal),
            attribute=RawAttribute(attr) if attr else None,
        ))

    return Mesh(tuple(triangles))


def encode_records(mesh: Mesh) -> np.ndarray:
    """Pack mesh triangles into an array of STL_RECORD_DTYPE records."""
    records = np.zeros(len(mesh), dtype=STL_RECORD_DTYPE)
    if mesh.is_empty:
        return records
    records['normals'] = [tuple(t.normal) for t in mesh.triangles]
    records['vectors'] = [[tuple(v) for v in t.vertices] for t in mesh.triangles]
    records['attr'] = [t.raw_attribute for t in mesh.triangles]
    return records


def encode_binary(
    mesh: Mesh,
    stream,
    header: Optional[Union[str, bytes]] = None,
) -> int:
    """Write a Mesh as binary STL.

    Colour attributes are written as zero; only RawAttribute values reach
    the attribute slot.

    Args:
        mesh: Mesh to write
        stream: Object with ``write(b)``
        header: Header text (defaults to DEFAULT_HEADER)

    Returns:
        Number of bytes written

    Raises:
        TooManyTrianglesError: mesh does not fit the uint32 count
        ValueError: header starts with 'solid '
        TransportError: the stream failed
    """
    n_triangles = len(mesh)
    if n_triangles > MAX_TRIANGLES:
        raise TooManyTrianglesError(n_triangles)

    preamble = (make_header(DEFAULT_HEADER if header is None else header)
                + np.array([n_triangles], dtype='<u4').tobytes())
    payload = encode_records(mesh).tobytes()

    _write_all(stream, preamble)
    _write_all(stream, payload)
    logger.debug("Encoded %d triangles (%d bytes)", n_triangles,
                 len(preamble) + len(payload))
    return len(preamble) + len(payload)


def decode_binary_bytes(data: bytes, strict: bool = False) -> Mesh:
    return decode_binary(io.BytesIO(data), strict=strict)


def encode_binary_bytes(mesh: Mesh, header: Optional[Union[str, bytes]] = None) -> bytes:
    buf = io.BytesIO()
    encode_binary(mesh, buf, header=header)
    return buf.getvalue()
