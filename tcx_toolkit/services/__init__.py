from tcx_toolkit.services.download import DownloadResult, DownloadService, ExportFailurePolicy
from tcx_toolkit.services.export import Exporter

__all__ = ['DownloadResult', 'DownloadService', 'ExportFailurePolicy', 'Exporter']
