"""
geometry/offsets_csv.py - Offset table CSV import.

Reads the combined long-format offset table, one offset per row:

    station_index,station_x,waterline_index,waterline_z,half_breadth
    0,0.0,0,0.0,0.0
    0,0.0,1,0.5,1.25
    ...

Lines starting with '#' are comments. An empty half_breadth cell marks a
missing offset. The older column name `half_breadth_y` is also accepted.
"""

from __future__ import annotations
import csv
import io
import os
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, TextIO, Union

from navhydro.errors import ArgumentError
from .model import HullGeometry, Offset, Station, Waterline

REQUIRED_COLUMNS = ("station_index", "station_x", "waterline_index", "waterline_z")
HALF_BREADTH_COLUMNS = ("half_breadth", "half_breadth_y")


def load_offsets_csv(
    source: Union[str, os.PathLike, TextIO],
    *,
    lpp=None,
    beam=None,
    design_draft=None,
    name: str = "",
) -> HullGeometry:
    """
    Parse an offset table into a HullGeometry.

    Args:
        source: File path or open text stream
        lpp, beam, design_draft: Optional principal particulars
        name: Geometry name (defaults to the file name for paths)

    Raises:
        ArgumentError: Missing columns, unparsable numbers, or a station or
            waterline index given two different coordinates
        GeometryIncompleteError: From HullGeometry validation
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, newline="", encoding="utf-8") as stream:
            return load_offsets_csv(
                stream, lpp=lpp, beam=beam, design_draft=design_draft,
                name=name or os.path.basename(os.fspath(source)),
            )

    stations: Dict[int, Decimal] = {}
    waterlines: Dict[int, Decimal] = {}
    offsets: List[Offset] = []

    reader = csv.DictReader(_strip_comments(source))
    columns = [c.strip() for c in (reader.fieldnames or [])]
    reader.fieldnames = columns
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    breadth_column = next((c for c in HALF_BREADTH_COLUMNS if c in columns), None)
    if missing or breadth_column is None:
        raise ArgumentError(
            f"Offset CSV missing columns: {', '.join(missing + ([] if breadth_column else ['half_breadth']))}",
            param="columns", value=columns,
        )

    for line, row in enumerate(reader, start=1):
        station_index = _parse_int(row["station_index"], "station_index", line)
        waterline_index = _parse_int(row["waterline_index"], "waterline_index", line)
        _register(stations, station_index, _parse_decimal(row["station_x"], "station_x", line), "station", line)
        _register(waterlines, waterline_index, _parse_decimal(row["waterline_z"], "waterline_z", line), "waterline", line)

        half_breadth = _parse_decimal(row[breadth_column], breadth_column, line, allow_blank=True)
        if half_breadth is not None:
            offsets.append(Offset(station_index, waterline_index, half_breadth))

    return HullGeometry(
        [Station(i, x) for i, x in stations.items()],
        [Waterline(j, z) for j, z in waterlines.items()],
        offsets,
        lpp=lpp,
        beam=beam,
        design_draft=design_draft,
        name=name,
    )


def loads_offsets_csv(text: str, **kwargs) -> HullGeometry:
    """load_offsets_csv() from a string."""
    return load_offsets_csv(io.StringIO(text), **kwargs)


# =============================================================================
# HELPERS
# =============================================================================

def _strip_comments(lines: Iterable[str]) -> Iterable[str]:
    for line in lines:
        if line.strip() and not line.lstrip().startswith("#"):
            yield line


def _parse_int(text: Optional[str], column: str, line: int) -> int:
    try:
        return int((text or "").strip())
    except ValueError:
        raise ArgumentError(f"Row {line}: {column} is not an integer: {text!r}",
                            param=column, value=text, line=line) from None


def _parse_decimal(text: Optional[str], column: str, line: int, allow_blank: bool = False) -> Optional[Decimal]:
    text = (text or "").strip()
    if not text and allow_blank:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ArgumentError(f"Row {line}: {column} is not a number: {text!r}",
                            param=column, value=text, line=line) from None
    if not value.is_finite():
        raise ArgumentError(f"Row {line}: {column} must be finite: {text!r}",
                            param=column, value=text, line=line)
    return value


def _register(table: Dict[int, Decimal], index: int, value: Decimal, kind: str, line: int) -> None:
    known = table.setdefault(index, value)
    if known != value:
        raise ArgumentError(
            f"Row {line}: {kind} {index} given coordinate {value}, previously {known}",
            param=f"{kind}_index", value=index, line=line,
        )
