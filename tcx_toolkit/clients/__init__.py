from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.clients.garmin import GarminClient
from tcx_toolkit.clients.mapmywalk import MapMyWalkClient

__all__ = ['BaseClient', 'GarminClient', 'MapMyWalkClient']
