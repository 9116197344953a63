"""Value types shared by the clients and services."""

import calendar
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tcx_toolkit.exceptions import InputError

_DATE_TOKEN = re.compile(r"^(\d{4})(\d{2})(\d{2})?$")


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ProxyConfig:
    """Upstream HTTP proxy given as ``host:port``."""

    host: str
    port: int

    @classmethod
    def parse(cls, token: str) -> "ProxyConfig":
        host, sep, port = token.strip().rpartition(":")
        if not sep or not host or not port.isdigit():
            raise InputError(f"'-P, --proxy' expects host:port, got '{token}'.")
        port_number = int(port)
        if not 0 < port_number < 65536:
            raise InputError(f"'-P, --proxy' port out of range: {port_number}.")
        return cls(host=host, port=port_number)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def as_requests_proxies(self) -> dict[str, str]:
        return {"http": self.url, "https": self.url}


@dataclass(frozen=True)
class DateSelector:
    """Target calendar month, or a single day within it."""

    year: int
    month: int
    day: Optional[int] = None

    @classmethod
    def parse(cls, token: str) -> "DateSelector":
        """Parse a ``YYYYMM`` or ``YYYYMMDD`` token."""
        match = _DATE_TOKEN.match(token.strip())
        if not match:
            raise InputError(f"'yyyymm[dd]' expected, got '{token}'.")

        year, month = int(match.group(1)), int(match.group(2))
        day = int(match.group(3)) if match.group(3) else None

        if not 1 <= month <= 12:
            raise InputError(f"invalid month in '{token}'.")
        if day is not None and not 1 <= day <= calendar.monthrange(year, month)[1]:
            raise InputError(f"invalid day in '{token}'.")
        return cls(year=year, month=month, day=day)

    def matches(self, moment: datetime) -> bool:
        if moment.year != self.year or moment.month != self.month:
            return False
        return self.day is None or moment.day == self.day

    @property
    def month_key(self) -> str:
        return f"{self.year:04d}{self.month:02d}"

    def __str__(self):
        if self.day is None:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class ActivityRef:
    """One listing entry: service id plus its local start time."""

    id: str
    begin: datetime
    name: Optional[str] = None


@dataclass(frozen=True)
class ExportedActivity:
    id: str
    local_start: datetime
    raw: bytes = field(repr=False)

    @property
    def filename(self) -> str:
        return f"{self.local_start:%Y%m%d-%H%M}-{self.id}.tcx"
