"""Base client interface for fitness platforms."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from tcx_toolkit.http import HttpSession
from tcx_toolkit.models import ActivityRef, Credentials, DateSelector, ProxyConfig


class BaseClient(ABC):
    """Abstract base class for fitness platform clients.

    ``verified`` becomes True once the platform has accepted the session,
    either at login or on the first authenticated call.
    """

    service: str = ""
    default_dir: str = ""

    def __init__(self, proxy: Optional[ProxyConfig] = None, http: Optional[HttpSession] = None):
        self.http = http if http is not None else HttpSession(proxy=proxy)
        self.verified = False

    @abstractmethod
    def login(self, credentials: Credentials) -> None:
        """Authenticate with the platform."""
        pass

    @abstractmethod
    def list_activities(self, selector: DateSelector, save_dir: Path) -> List[ActivityRef]:
        """List activities, saving the raw listing under ``save_dir``."""
        pass

    @abstractmethod
    def export_url(self, activity_id: str) -> str:
        """URL of the TCX export for one activity."""
        pass

    def fetch_export(self, activity_id: str):
        """GET the TCX export of one activity."""
        return self.http.get(self.export_url(activity_id))
