"""Services for travel_nav."""

from .cost_matrix import CostMatrix, CostMatrixCache
from .navigator import Navigator, travel_to
from .route_planner import RoutePlanner
from .stuck import StuckDetector

__all__ = ["CostMatrix", "CostMatrixCache", "Navigator", "RoutePlanner", "StuckDetector", "travel_to"]
