"""
NAVHYDRO Geometry

Offset-table hull representation, CSV import and standard hull forms.
"""

from .model import (
    MISSING,
    Station,
    Waterline,
    Offset,
    Loadcase,
    HullGeometry,
)

from .offsets_csv import (
    load_offsets_csv,
    loads_offsets_csv,
)

from .library import (
    rectangular_barge,
    wigley_hull,
    wigley_reference,
)

__all__ = [
    "MISSING",
    "Station",
    "Waterline",
    "Offset",
    "Loadcase",
    "HullGeometry",
    "load_offsets_csv",
    "loads_offsets_csv",
    "rectangular_barge",
    "wigley_hull",
    "wigley_reference",
]
