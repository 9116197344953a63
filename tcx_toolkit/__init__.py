"""Download TCX activity files from Garmin Connect and MapMyWalk."""

__version__ = "0.1.0"
