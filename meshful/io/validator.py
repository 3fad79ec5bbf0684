"""
Mesh validation.

Performs integrity checks on a triangle soup:
- Non-finite coordinates (NaN/Inf passed through by the decoder)
- Degenerate triangles (zero area)
- Stored normals pointing against the vertex winding
- Boundary edges (open mesh) and non-manifold edges

Edges are matched by exact vertex position, since a triangle soup has no
shared vertex indices. Warnings do not make a mesh invalid; errors do.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

from meshful.geometry.mesh import Mesh
from meshful.geometry.vec3 import dot

logger = logging.getLogger(__name__)

Edge = Tuple[Tuple[float, float, float], Tuple[float, float, float]]


class ValidationSeverity(Enum):
    """Severity level of validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single validation issue found in the mesh."""
    code: str
    severity: ValidationSeverity
    message: str
    count: int = 1
    details: List[int] = field(default_factory=list)  # triangle indices

    def __str__(self) -> str:
        if self.count > 1:
            return f"[{self.severity.value.upper()}] {self.code}: {self.message} ({self.count} occurrences)"
        return f"[{self.severity.value.upper()}] {self.code}: {self.message}"


@dataclass
class ValidationReport:
    """Complete validation report for a mesh."""
    n_triangles: int
    n_boundary_edges: int = 0
    n_non_manifold_edges: int = 0
    n_degenerate_triangles: int = 0
    n_normal_mismatches: int = 0
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def is_closed(self) -> bool:
        return self.n_triangles > 0 and self.n_boundary_edges == 0

    @property
    def is_manifold(self) -> bool:
        return self.n_non_manifold_edges == 0

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Mesh Validation Report",
            "=" * 40,
            f"Triangles: {self.n_triangles}",
            "",
            f"Closed: {'Yes' if self.is_closed else 'No'}",
            f"Manifold: {'Yes' if self.is_manifold else 'No'}",
            f"Degenerate triangles: {self.n_degenerate_triangles}",
            f"Normal mismatches: {self.n_normal_mismatches}",
            f"Boundary edges: {self.n_boundary_edges}",
            f"Non-manifold edges: {self.n_non_manifold_edges}",
        ]

        if self.issues:
            lines.append("")
            lines.append("Issues:")
            for issue in self.issues:
                lines.append(f"  - {issue}")

        lines.append("")
        lines.append(f"Overall: {'VALID' if self.is_valid else 'INVALID'}")
        return "\n".join(lines)


def _build_edge_map(mesh: Mesh) -> Dict[Edge, List[int]]:
    """Map each undirected edge (sorted position pair) to triangle indices."""
    edge_to_triangles: Dict[Edge, List[int]] = defaultdict(list)

    for ti, triangle in enumerate(mesh.triangles):
        points = [tuple(v) for v in triangle.vertices]
        for i in range(3):
            a, b = points[i], points[(i + 1) % 3]
            edge = (a, b) if a <= b else (b, a)
            edge_to_triangles[edge].append(ti)

    return edge_to_triangles


def validate_mesh(mesh: Mesh, degenerate_area_threshold: float = 1e-12) -> ValidationReport:
    """Validate mesh integrity.

    Args:
        mesh: Mesh to check
        degenerate_area_threshold: Triangles with a smaller area are degenerate

    Returns:
        ValidationReport with all findings
    """
    report = ValidationReport(n_triangles=len(mesh))
    logger.debug("Validating mesh: %d triangles", len(mesh))

    if mesh.is_empty:
        report.issues.append(ValidationIssue(
            code="EMPTY_MESH",
            severity=ValidationSeverity.ERROR,
            message="Mesh has no triangles",
        ))
        logger.error("Mesh has no triangles")
        return report

    non_finite: List[int] = []
    degenerate: List[int] = []
    mismatched: List[int] = []

    for ti, triangle in enumerate(mesh.triangles):
        if not all(v.is_finite() for v in (*triangle.vertices, triangle.normal)):
            non_finite.append(ti)
            continue
        if triangle.area() < degenerate_area_threshold:
            degenerate.append(ti)
            continue
        # A zero stored normal means "not given" and is not a mismatch
        if triangle.normal.length() > 0.0 and dot(triangle.normal, triangle.winding_normal()) < 0.0:
            mismatched.append(ti)

    if non_finite:
        report.issues.append(ValidationIssue(
            code="NON_FINITE_COORDINATES",
            severity=ValidationSeverity.ERROR,
            message=f"{len(non_finite)} triangles have NaN or infinite values",
            count=len(non_finite),
            details=non_finite[:10],
        ))
        logger.error("Mesh has %d triangles with non-finite values", len(non_finite))

    report.n_degenerate_triangles = len(degenerate)
    if degenerate:
        report.issues.append(ValidationIssue(
            code="DEGENERATE_TRIANGLES",
            severity=ValidationSeverity.WARNING,
            message=f"{len(degenerate)} triangles have zero area",
            count=len(degenerate),
            details=degenerate[:10],
        ))
        logger.warning("Mesh has %d degenerate triangles", len(degenerate))

    report.n_normal_mismatches = len(mismatched)
    if mismatched:
        report.issues.append(ValidationIssue(
            code="NORMAL_MISMATCH",
            severity=ValidationSeverity.WARNING,
            message=f"{len(mismatched)} stored normals point against the vertex winding",
            count=len(mismatched),
            details=mismatched[:10],
        ))
        logger.warning("Mesh has %d normals inconsistent with winding", len(mismatched))

    edge_to_triangles = _build_edge_map(mesh)
    boundary = [e for e, ts in edge_to_triangles.items() if len(ts) == 1]
    non_manifold = [e for e, ts in edge_to_triangles.items() if len(ts) > 2]
    report.n_boundary_edges = len(boundary)
    report.n_non_manifold_edges = len(non_manifold)

    if boundary:
        report.issues.append(ValidationIssue(
            code="BOUNDARY_EDGES",
            severity=ValidationSeverity.WARNING,
            message=f"Mesh has {len(boundary)} boundary edges (not closed)",
            count=len(boundary),
        ))
        logger.warning("Mesh has %d boundary edges", len(boundary))

    if non_manifold:
        report.issues.append(ValidationIssue(
            code="NON_MANIFOLD_EDGES",
            severity=ValidationSeverity.ERROR,
            message=f"Mesh has {len(non_manifold)} non-manifold edges (>2 triangles)",
            count=len(non_manifold),
        ))
        logger.error("Mesh has %d non-manifold edges", len(non_manifold))

    logger.info("Validation complete: %s", "VALID" if report.is_valid else "INVALID")
    return report
