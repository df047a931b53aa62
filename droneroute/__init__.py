"""Mini README: Core package initializer for the droneroute engine.

The package turns unordered survey waypoints into battery-feasible flights
while checking them against restricted airspace and densely inhabited
districts. Only the logging factory is re-exported here so importing the
package stays cheap; the planning services live in their subpackages.
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
