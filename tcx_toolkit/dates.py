"""Date selection and local-time helpers."""

import re
from datetime import datetime
from typing import Iterable, List, Union

from tcx_toolkit.models import ActivityRef, DateSelector

_ISO_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?::\d{2})?)"
    r"(?:[.,](?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:?\d{2})?$"
)


def from_epoch_millis(millis: Union[int, float, str]) -> datetime:
    """Convert epoch milliseconds to a local datetime, rounded to the second."""
    seconds = round(int(millis) / 1000.0)
    return datetime.fromtimestamp(seconds).astimezone()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp and convert it to local time.

    ``Z``, ``+HHMM`` offsets and fractions of any length are accepted.
    Values without an offset are taken as local time already.
    """
    text = value.strip()
    match = _ISO_TIMESTAMP.match(text)
    if match:
        text = match.group("base")
        if match.group("fraction"):
            text += "." + match.group("fraction")[:6].ljust(6, "0")
        offset = match.group("offset")
        if offset in ("Z", "z"):
            text += "+00:00"
        elif offset:
            text += f"{offset[:3]}:{offset[-2:]}"
    return datetime.fromisoformat(text).astimezone()


def filter_activities(
    refs: Iterable[ActivityRef], selector: DateSelector
) -> List[ActivityRef]:
    """Keep the refs whose local start date matches ``selector``.

    Order is preserved and duplicates are kept.
    """
    return [ref for ref in refs if selector.matches(ref.begin)]
