"""drivelog - driver logged-hours tracking with JSON-file persistence."""

__version__ = "1.0.0"
