"""Download service: login, list, filter and export one month or day."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.dates import filter_activities
from tcx_toolkit.exceptions import ExportError, InputError
from tcx_toolkit.models import Credentials, DateSelector
from tcx_toolkit.services.export import Exporter

logger = logging.getLogger(__name__)


class ExportFailurePolicy(str, Enum):
    """What to do when one export cannot be read."""

    ABORT = "abort"
    SKIP = "skip"

    @classmethod
    def parse(cls, value: str) -> "ExportFailurePolicy":
        try:
            return cls(value.lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise InputError(f"export failure policy must be one of {choices}, got '{value}'.")


@dataclass
class DownloadResult:
    listed: int = 0
    matched: int = 0
    saved: List[Path] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class DownloadService:
    """Service for downloading the TCX files of one period from a platform."""

    def __init__(
        self,
        client: BaseClient,
        exporter: Optional[Exporter] = None,
        policy: ExportFailurePolicy = ExportFailurePolicy.ABORT,
        report: Optional[Callable[[str], None]] = None,
    ):
        self.client = client
        self.exporter = exporter or Exporter()
        self.policy = policy
        self.report = report or (lambda message: None)

    def download(self, credentials: Credentials, selector: DateSelector, save_dir: Path) -> DownloadResult:
        """Download every activity of ``selector`` into ``save_dir``."""
        save_dir = Path(save_dir)
        result = DownloadResult()

        self.client.login(credentials)
        announced = self._announce_login()

        refs = self.client.list_activities(selector, save_dir)
        if not announced:
            self._announce_login()
        result.listed = len(refs)

        matches = filter_activities(refs, selector)
        result.matched = len(matches)
        logger.info(f"Found {len(matches)} of {len(refs)} activities on {selector}")

        for ref in matches:
            try:
                exported = self.exporter.export_one(self.client, ref.id)
            except ExportError as e:
                if self.policy is ExportFailurePolicy.ABORT:
                    raise
                logger.warning(f"Skipping activity {ref.id}: {e.reason}")
                result.failed.append(ref.id)
                continue

            path = self.exporter.save(exported, save_dir)
            result.saved.append(path)
            self.report(path.name)

        self.report(f"total {len(result.saved)} tcx files downloaded.")
        return result

    def _announce_login(self) -> bool:
        if not self.client.verified:
            return False
        self.report(f"{self.client.service} login successful.")
        return True
