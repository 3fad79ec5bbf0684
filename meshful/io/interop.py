"""
Conversion between meshful meshes and numpy-stl ``stl.mesh.Mesh`` objects.

numpy-stl stores triangles in a structured array with ``normals``,
``vectors`` and ``attr`` fields, the same layout as a binary STL record.
"""

import numpy as np
from stl import mesh as stl_mesh

from meshful.geometry.mesh import Mesh
from meshful.geometry.triangle import RawAttribute, Triangle
from meshful.geometry.vec3 import Vec3
from meshful.io.stl_binary import encode_records


def to_stl_mesh(mesh: Mesh) -> stl_mesh.Mesh:
    """Build a numpy-stl mesh with the same normals, vertices and attributes.

    numpy-stl's constructor may recompute normals; the stored normals are
    copied back afterwards so both sides hold identical data.
    """
    records = encode_records(mesh)
    data = np.zeros(len(mesh), dtype=stl_mesh.Mesh.dtype)
    data['normals'] = records['normals']
    data['vectors'] = records['vectors']
    data['attr'] = records['attr'].reshape(-1, 1)

    result = stl_mesh.Mesh(data, calculate_normals=False)
    result.normals[:] = records['normals']
    return result


def from_stl_mesh(source: stl_mesh.Mesh) -> Mesh:
    """Convert a numpy-stl mesh; non-zero ``attr`` values become RawAttribute."""
    normals = np.asarray(source.normals, dtype=np.float32).tolist()
    vectors = np.asarray(source.vectors, dtype=np.float32).tolist()
    attrs = np.asarray(source.attr).reshape(-1).astype(int).tolist()

    triangles = []
    for normal, (v0, v1, v2), attr in zip(normals, vectors, attrs):
        triangles.append(Triangle(
            vertices=(Vec3(*v0), Vec3(*v1), Vec3(*v2)),
            normal=Vec3(*normal),
            attribute=RawAttribute(attr) if attr else None,
        ))
    return Mesh(tuple(triangles))
