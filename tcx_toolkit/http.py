"""HTTP session and HTML form handling shared by the service clients."""

import logging
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from tcx_toolkit.config import Config
from tcx_toolkit.exceptions import FormNotFoundError, ServiceConnectionError
from tcx_toolkit.models import ProxyConfig

logger = logging.getLogger(__name__)

_REFRESH_URL = re.compile(r"url\s*=\s*['\"]?([^'\";]+)", re.IGNORECASE)


def _host_of(url: str) -> str:
    return urlparse(url).hostname or url


def find_meta_refresh(response: requests.Response) -> Optional[str]:
    """Return the absolute target of a ``<meta http-equiv="refresh">`` tag."""
    if "html" not in response.headers.get("Content-Type", ""):
        return None

    soup = BeautifulSoup(response.text, "html.parser")
    for tag in soup.find_all("meta"):
        if str(tag.get("http-equiv", "")).lower() != "refresh":
            continue
        match = _REFRESH_URL.search(str(tag.get("content", "")))
        if match:
            return urljoin(response.url, match.group(1).strip())
    return None


class HttpSession:
    """Cookie-keeping HTTP session bound to one run.

    Redirects are followed by requests; meta-refresh pages are followed here.
    """

    def __init__(
        self,
        proxy: Optional[ProxyConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"User-Agent": Config.USER_AGENT})
        self.proxy = proxy
        if proxy is not None:
            self.session.proxies.update(proxy.as_requests_proxies())
            logger.info(f"Using proxy {proxy.host}:{proxy.port}")

    def get(self, url: str, params: Optional[dict[str, Any]] = None) -> requests.Response:
        return self._request("GET", url, params=params)

    def post(self, url: str, data: Optional[dict[str, Any]] = None) -> requests.Response:
        return self._request("POST", url, data=data)

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        response = self._send(method, url, **kwargs)

        for _ in range(Config.MAX_META_REFRESH):
            target = find_meta_refresh(response)
            if not target:
                break
            logger.debug(f"Following meta refresh to {target}")
            response = self._send("GET", target)

        return response

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug(f"{method} {url}")
        try:
            return self.session.request(
                method, url, timeout=Config.REQUEST_TIMEOUT, allow_redirects=True, **kwargs
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ServiceConnectionError(_host_of(url), str(e)) from e

    @staticmethod
    def save(response: requests.Response, save_path: Path) -> Path:
        """Write the response body to disk byte for byte."""
        with open(save_path, "wb") as f:
            f.write(response.content)
        return save_path


class HtmlForm:
    """A submittable HTML form scraped from a page."""

    def __init__(self, action: str, method: str, fields: dict[str, str], ids: dict[str, str]):
        self.action = action
        self.method = method
        self.fields = fields
        self._ids = ids

    @classmethod
    def from_response(cls, response: requests.Response, form_id: Optional[str] = None) -> "HtmlForm":
        """Locate a form by id, or the first form on the page."""
        soup = BeautifulSoup(response.text, "html.parser")
        form = soup.find("form", id=form_id) if form_id else soup.find("form")
        if form is None:
            where = f"id '{form_id}'" if form_id else "any form"
            raise FormNotFoundError(f"no form with {where} on {response.url}")

        fields: dict[str, str] = {}
        ids: dict[str, str] = {}
        submit_taken = False

        for element in form.find_all(["input", "select", "textarea", "button"]):
            name = element.get("name")
            if element.get("id") and name:
                ids[element["id"]] = name
            if not name:
                continue

            kind = str(element.get("type", "text" if element.name == "input" else "")).lower()
            if element.name == "button" or kind in ("submit", "image"):
                if kind in ("", "submit", "image") and not submit_taken:
                    fields[name] = element.get("value", "")
                    submit_taken = True
                continue
            if kind in ("checkbox", "radio") and not element.has_attr("checked"):
                continue
            if kind in ("reset", "file"):
                continue

            if element.name == "select":
                option = element.find("option", selected=True) or element.find("option")
                fields[name] = option.get("value", option.get_text()) if option else ""
            elif element.name == "textarea":
                fields[name] = element.get_text()
            else:
                fields[name] = element.get("value", "")

        action = urljoin(response.url, form.get("action") or response.url)
        method = str(form.get("method", "get")).upper()
        return cls(action=action, method=method, fields=fields, ids=ids)

    def set_by_id(self, element_id: str, value: str) -> None:
        name = self._ids.get(element_id)
        if name is None:
            raise FormNotFoundError(f"no field with id '{element_id}' in form")
        self.fields[name] = value

    def submit(self, http: HttpSession) -> requests.Response:
        if self.method == "POST":
            return http.post(self.action, data=self.fields)
        return http.get(self.action, params=self.fields)
