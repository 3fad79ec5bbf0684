"""
Mesh statistics calculation module.

Provides:
- Bounding box corners, dimensions, center and diagonal
- Surface area and signed volume
- Triangle and unique vertex counts

Statistics are a reporting aid: unlike ``Mesh.bounding_box`` they never
raise on an empty mesh and report a zero box instead.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from numpy.typing import NDArray

from meshful.geometry.mesh import Mesh

logger = logging.getLogger(__name__)


@dataclass
class BoundingBox:
    """Axis-Aligned Bounding Box (AABB) for a mesh.

    Attributes:
        min_point: Minimum corner (x_min, y_min, z_min)
        max_point: Maximum corner (x_max, y_max, z_max)
    """
    min_point: NDArray[np.float64]
    max_point: NDArray[np.float64]

    @property
    def dimensions(self) -> NDArray[np.float64]:
        """Get box dimensions (width, height, depth)."""
        return self.max_point - self.min_point

    @property
    def center(self) -> NDArray[np.float64]:
        """Get box center point."""
        return (self.min_point + self.max_point) / 2

    @property
    def diagonal(self) -> float:
        """Get box diagonal length."""
        return float(np.linalg.norm(self.dimensions))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'min': self.min_point.tolist(),
            'max': self.max_point.tolist(),
            'dimensions': self.dimensions.tolist(),
            'center': self.center.tolist(),
            'diagonal': self.diagonal,
        }


@dataclass
class MeshStatistics:
    """Summary numbers for a mesh.

    Attributes:
        n_triangles: Number of triangles
        n_vertices: Number of distinct vertex positions
        bbox: Axis-aligned bounding box
        surface_area: Total surface area
        volume: Signed volume (negative if the winding is inverted)
    """
    n_triangles: int
    n_vertices: int
    bbox: BoundingBox
    surface_area: float
    volume: float

    @property
    def dimensions(self) -> Tuple[float, float, float]:
        dims = self.bbox.dimensions
        return (float(dims[0]), float(dims[1]), float(dims[2]))

    def summary(self) -> str:
        """Generate human-readable summary."""
        dims = self.dimensions
        center = self.bbox.center
        lines = [
            "Mesh Statistics",
            "=" * 40,
            f"Triangles:    {self.n_triangles:,}",
            f"Vertices:     {self.n_vertices:,}",
            "",
            f"Dimensions:   {dims[0]:.4f} x {dims[1]:.4f} x {dims[2]:.4f}",
            f"Diagonal:     {self.bbox.diagonal:.4f}",
            f"Center:       ({center[0]:.4f}, {center[1]:.4f}, {center[2]:.4f})",
            "",
            f"Surface Area: {self.surface_area:.4f}",
            f"Volume:       {self.volume:.4f}",
        ]
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'n_triangles': self.n_triangles,
            'n_vertices': self.n_vertices,
            'bbox': self.bbox.to_dict(),
            'surface_area': self.surface_area,
            'volume': self.volume,
            'dimensions': list(self.dimensions),
        }


def triangle_vectors(mesh: Mesh) -> NDArray[np.float64]:
    """Stack triangle vertices into an (N, 3, 3) array."""
    if mesh.is_empty:
        return np.zeros((0, 3, 3), dtype=np.float64)
    return np.array(
        [[tuple(v) for v in t.vertices] for t in mesh.triangles],
        dtype=np.float64,
    )


def calculate_bounding_box(vectors: NDArray[np.float64]) -> BoundingBox:
    """Calculate axis-aligned bounding box for (N, 3, 3) triangle vectors."""
    if len(vectors) == 0:
        return BoundingBox(
            min_point=np.zeros(3),
            max_point=np.zeros(3)
        )

    points = vectors.reshape(-1, 3)
    return BoundingBox(
        min_point=np.min(points, axis=0),
        max_point=np.max(points, axis=0)
    )


def count_unique_vertices(vectors: NDArray[np.float64]) -> int:
    if len(vectors) == 0:
        return 0
    return len(np.unique(vectors.reshape(-1, 3), axis=0))


def calculate_mesh_statistics(mesh: Mesh) -> MeshStatistics:
    """Calculate statistics for a mesh.

    Area and volume come from the Triangle/Mesh queries so the report
    agrees with them exactly; bounding box and vertex count are computed
    over the stacked vertex array.

    Example:
        >>> stats = calculate_mesh_statistics(mesh)
        >>> print(stats.summary())
    """
    vectors = triangle_vectors(mesh)
    stats = MeshStatistics(
        n_triangles=len(mesh),
        n_vertices=count_unique_vertices(vectors),
        bbox=calculate_bounding_box(vectors),
        surface_area=mesh.surface_area(),
        volume=mesh.volume(),
    )
    logger.debug("Mesh statistics: %d triangles, %d vertices",
                 stats.n_triangles, stats.n_vertices)
    return stats
