"""Export service: fetch one TCX file, name it and store it unchanged."""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path

import requests

from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.dates import parse_timestamp
from tcx_toolkit.exceptions import ExportError
from tcx_toolkit.models import ExportedActivity

logger = logging.getLogger(__name__)

START_TIME_PATH = ("TrainingCenterDatabase", "Activities", "Activity", "Id")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str):
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def parse_start_time(activity_id: str, raw: bytes) -> datetime:
    """Read ``Activities/Activity/Id`` from a TCX document as local time."""
    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise ExportError(activity_id, f"malformed TCX: {e}") from e

    if _local_name(root.tag) != START_TIME_PATH[0]:
        raise ExportError(activity_id, f"unexpected root element <{_local_name(root.tag)}>")

    element = root
    for name in START_TIME_PATH[1:]:
        element = _child(element, name)
        if element is None:
            raise ExportError(activity_id, f"missing {'/'.join(START_TIME_PATH)}")

    text = (element.text or "").strip()
    try:
        return parse_timestamp(text)
    except ValueError as e:
        raise ExportError(activity_id, f"unreadable start time '{text}'") from e


class Exporter:
    """Fetches TCX exports and writes them to disk byte for byte."""

    def export_one(self, client: BaseClient, activity_id: str) -> ExportedActivity:
        response = client.fetch_export(activity_id)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ExportError(activity_id, str(e)) from e

        raw = response.content
        local_start = parse_start_time(activity_id, raw)
        return ExportedActivity(id=activity_id, local_start=local_start, raw=raw)

    def save(self, exported: ExportedActivity, save_dir: Path) -> Path:
        save_path = Path(save_dir) / exported.filename
        with open(save_path, "wb") as f:
            f.write(exported.raw)
        logger.info(f"Saved activity {exported.id} to {save_path}")
        return save_path
