"""
Pytest configuration and fixtures for meshful.

Provides:
- In-memory meshes (unit right-tetrahedron, cube)
- Binary STL bytes and files, some written with numpy-stl
- Stream doubles for short reads and transport failures
"""

import io
import logging
import struct
from pathlib import Path
from typing import List

import numpy as np
import pytest
from stl import Mode
from stl import mesh as stl_mesh

from meshful.geometry.mesh import Mesh
from meshful.geometry.triangle import Triangle
from meshful.geometry.vec3 import Vec3


# ============================================================================
# Mesh Fixtures
# ============================================================================

def make_tetrahedron() -> Mesh:
    """Unit right-tetrahedron with outward normals and consistent winding."""
    return Mesh((
        Triangle(
            normal=Vec3(0, 0, -1),
            vertices=(Vec3(0, 0, 0), Vec3(0, 1, 0), Vec3(1, 0, 0)),
        ),
        Triangle(
            normal=Vec3(0, -1, 0),
            vertices=(Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 0, 1)),
        ),
        Triangle(
            normal=Vec3(0.57735, 0.57735, 0.57735),
            vertices=(Vec3(0, 0, 1), Vec3(1, 0, 0), Vec3(0, 1, 0)),
        ),
        Triangle(
            normal=Vec3(-1, 0, 0),
            vertices=(Vec3(0, 0, 0), Vec3(0, 0, 1), Vec3(0, 1, 0)),
        ),
    ))


def make_cube(size: float = 10.0) -> Mesh:
    """Closed cube centred at the origin, 12 outward-wound triangles."""
    hs = size / 2
    corners = [
        (-hs, -hs, -hs), (+hs, -hs, -hs), (+hs, +hs, -hs), (-hs, +hs, -hs),  # bottom
        (-hs, -hs, +hs), (+hs, -hs, +hs), (+hs, +hs, +hs), (-hs, +hs, +hs),  # top
    ]
    faces = [
        [0, 2, 1], [0, 3, 2],  # bottom
        [4, 5, 6], [4, 6, 7],  # top
        [0, 1, 5], [0, 5, 4],  # front
        [2, 3, 7], [2, 7, 6],  # back
        [0, 4, 7], [0, 7, 3],  # left
        [1, 2, 6], [1, 6, 5],  # right
    ]
    return Mesh(tuple(
        Triangle.from_vertices(*(Vec3(*corners[i]) for i in face))
        for face in faces
    ))


@pytest.fixture
def tetrahedron() -> Mesh:
    return make_tetrahedron()


@pytest.fixture
def cube() -> Mesh:
    return make_cube()


# ============================================================================
# Binary STL Helpers
# ============================================================================

def stl_record(normal, v0, v1, v2, attr: int = 0) -> bytes:
    """Pack one 50-byte binary STL record with the struct module."""
    return struct.pack('<12fH', *normal, *v0, *v1, *v2, attr)


def stl_bytes(records: List[bytes], count: int = None, header: bytes = b"test header") -> bytes:
    """Assemble header, count and records; ``count`` defaults to len(records)."""
    if count is None:
        count = len(records)
    return header.ljust(80, b'\x00') + struct.pack('<I', count) + b"".join(records)


@pytest.fixture
def three_triangle_stl() -> bytes:
    """N=3 followed by exactly three records with distinct x offsets."""
    records = [
        stl_record((0, 0, 1), (i, 0, 0), (i + 1, 0, 0), (i, 1, 0))
        for i in range(3)
    ]
    return stl_bytes(records)


class ChunkedReader(io.RawIOBase):
    """Readable stream that returns at most ``chunk`` bytes per read."""

    def __init__(self, data: bytes, chunk: int = 7):
        self._data = io.BytesIO(data)
        self._chunk = chunk

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = self._chunk
        return self._data.read(min(size, self._chunk))


class FailingStream(io.RawIOBase):
    """Stream that serves ``good`` bytes, then raises OSError on read/write."""

    def __init__(self, good: bytes = b""):
        self._data = io.BytesIO(good)

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        chunk = self._data.read(size)
        if chunk:
            return chunk
        raise OSError("connection reset")

    def write(self, b) -> int:
        raise OSError("disk full")


class StalledStream(io.RawIOBase):
    """Non-blocking stream with nothing available: read and write return ``result``."""

    def __init__(self, result=None):
        self._result = result

    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def read(self, size: int = -1):
        return self._result

    def write(self, b):
        return self._result


# ============================================================================
# numpy-stl Fixtures
# ============================================================================

@pytest.fixture
def numpy_stl_cube_path(tmp_path: Path) -> Path:
    """Binary cube STL written by numpy-stl."""
    cube = make_cube()
    data = np.zeros(len(cube), dtype=stl_mesh.Mesh.dtype)
    for i, triangle in enumerate(cube):
        data['vectors'][i] = [tuple(v) for v in triangle.vertices]
    m = stl_mesh.Mesh(data)
    path = tmp_path / "cube.stl"
    m.save(str(path), mode=Mode.BINARY)
    return path


# ============================================================================
# Logging Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees records in every test."""
    yield
    logger = logging.getLogger("meshful")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for log_filter in list(logger.filters):
        logger.removeFilter(log_filter)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ============================================================================
# Config Isolation
# ============================================================================

@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch):
    """Run with an empty cwd and home so no real .meshful.json is found."""
    cwd = tmp_path / "cwd"
    home = tmp_path / "home"
    cwd.mkdir()
    home.mkdir()
    monkeypatch.chdir(cwd)
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return cwd, home
