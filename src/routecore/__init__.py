"""Route sequencing, proximity scanning and record deduplication engine."""

from .models.domain import GeoRecord, has_fix
from .schemas.optimizer import CostObjective, OptimizerConfig, SpeedBand, StartLocation
from .services.balancing import find_reassignments, quick_route_audit
from .services.cleaning import CleaningWorker, run_cleaning_scan
from .services.geospatial import haversine_km, travel_time_min
from .services.progress import CancellationToken, OperationCancelled, ProgressTracker
from .services.proximity import count_nearby, scan_same_location
from .services.routing import sequence_route

__all__ = [
    "CancellationToken",
    "CleaningWorker",
    "CostObjective",
    "GeoRecord",
    "OperationCancelled",
    "OptimizerConfig",
    "ProgressTracker",
    "SpeedBand",
    "StartLocation",
    "count_nearby",
    "find_reassignments",
    "has_fix",
    "haversine_km",
    "quick_route_audit",
    "run_cleaning_scan",
    "scan_same_location",
    "sequence_route",
    "travel_time_min",
]
