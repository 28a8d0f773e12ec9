"""
service/repository.py - Vessel geometry and loadcase lookup.

The engine reads geometry "as of call time": each request resolves its
snapshot once through a GeometryProvider and never sees later updates.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Protocol
import logging
import threading

from navhydro.errors import ArgumentError, NotFoundError
from navhydro.geometry.model import HullGeometry, Loadcase

logger = logging.getLogger(__name__)


class GeometryProvider(Protocol):
    """Source of immutable geometry and loadcase snapshots."""

    def get_geometry(self, vessel_id: str) -> HullGeometry:
        ...

    def get_loadcase(self, vessel_id: str, loadcase_id: str) -> Loadcase:
        ...


class InMemoryVesselRepository:
    """
    Thread-safe in-memory GeometryProvider.

    Re-importing a vessel replaces its geometry; calculations already holding
    the previous snapshot are unaffected.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._geometry: Dict[str, HullGeometry] = {}
        self._loadcases: Dict[str, Dict[str, Loadcase]] = {}

    def add_vessel(self, vessel_id: str, geometry: HullGeometry) -> None:
        if not vessel_id:
            raise ArgumentError("vessel_id is required", param="vessel_id", value=vessel_id)
        with self._lock:
            replaced = vessel_id in self._geometry
            self._geometry[vessel_id] = geometry
            self._loadcases.setdefault(vessel_id, {})
        logger.debug(f"{'Replaced' if replaced else 'Added'} vessel {vessel_id}: {geometry!r}")

    def add_loadcase(self, vessel_id: str, loadcase: Loadcase) -> None:
        if not loadcase.loadcase_id:
            raise ArgumentError("Loadcase must have a loadcase_id", param="loadcase_id", value="")
        with self._lock:
            if vessel_id not in self._geometry:
                raise NotFoundError("vessel", vessel_id)
            self._loadcases[vessel_id][loadcase.loadcase_id] = loadcase

    def remove_vessel(self, vessel_id: str) -> None:
        with self._lock:
            if self._geometry.pop(vessel_id, None) is None:
                raise NotFoundError("vessel", vessel_id)
            self._loadcases.pop(vessel_id, None)

    def list_vessels(self) -> List[str]:
        with self._lock:
            return sorted(self._geometry)

    def list_loadcases(self, vessel_id: str) -> List[str]:
        with self._lock:
            if vessel_id not in self._loadcases:
                raise NotFoundError("vessel", vessel_id)
            return sorted(self._loadcases[vessel_id])

    def get_geometry(self, vessel_id: str) -> HullGeometry:
        with self._lock:
            geometry: Optional[HullGeometry] = self._geometry.get(vessel_id)
        if geometry is None:
            raise NotFoundError("vessel", vessel_id)
        return geometry

    def get_loadcase(self, vessel_id: str, loadcase_id: str) -> Loadcase:
        with self._lock:
            if vessel_id not in self._geometry:
                raise NotFoundError("vessel", vessel_id)
            loadcase = self._loadcases[vessel_id].get(loadcase_id)
        if loadcase is None:
            raise NotFoundError("loadcase", loadcase_id)
        return loadcase
