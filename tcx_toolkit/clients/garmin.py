"""Garmin Connect client implementation.

Login goes through the SSO widget form. The service does not say whether the
credentials were accepted, so the first listing call doubles as the check.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import List, Mapping, Optional

import requests

from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.dates import from_epoch_millis
from tcx_toolkit.exceptions import (
    AuthError,
    FormNotFoundError,
    ListingError,
    ServiceConnectionError,
)
from tcx_toolkit.http import HtmlForm
from tcx_toolkit.models import ActivityRef, Credentials, DateSelector

logger = logging.getLogger(__name__)

RESPONSE_URL = re.compile(r"var\s+response_url\s*=\s*'(.*)';")

_SSO_PARAMS = MappingProxyType({
    "service": "https://connect.garmin.com/post-auth/login",
    "webhost": "olaxpw-connect13.garmin.com",
    "source": "https://connect.garmin.com/en-US/signin",
    "redirectAfterAccountLoginUrl": "https://connect.garmin.com/post-auth/login",
    "redirectAfterAccountCreationUrl": "https://connect.garmin.com/post-auth/login",
    "gauthHost": "https://sso.garmin.com/sso",
    "locale": "en_US",
    "id": "gauth-widget",
    "cssUrl": "https://static.garmincdn.com/com.garmin.connect/ui/css/gauth-custom-v1.2-min.css",
    "clientId": "GarminConnect",
    "rememberMeShown": "true",
    "rememberMeChecked": "false",
    "createAccountShown": "true",
    "openCreateAccount": "false",
    "usernameShown": "false",
    "displayNameShown": "false",
    "consumeServiceTicket": "false",
    "initialFocus": "true",
    "embedWidget": "false",
    "generateExtraServiceTicket": "false",
})


@dataclass(frozen=True)
class GarminEndpoints:
    login_url: str = "https://sso.garmin.com/sso/login"
    login_params: Mapping[str, str] = field(default_factory=lambda: _SSO_PARAMS, hash=False)
    login_form_id: str = "login-form"
    username_field_id: str = "username"
    password_field_id: str = "password"
    activities_url: str = (
        "https://connect.garmin.com/proxy/activity-search-service-1.0/json/activities"
        "?start=0&limit=100"
    )
    tcx_export_url: str = (
        "https://connect.garmin.com/proxy/activity-service-1.2/tcx/activity/{id}?full=true"
    )
    snapshot_name: str = "activities.json"


def extract_response_url(body: str) -> Optional[str]:
    """Pull the post-login redirect out of the SSO response page."""
    match = RESPONSE_URL.search(body)
    if not match:
        return None
    return match.group(1).replace("\\/", "/")


class GarminClient(BaseClient):
    """Client for Garmin Connect."""

    service = "garmin"
    default_dir = "tcx-garmin"

    def __init__(self, proxy=None, http=None, endpoints: Optional[GarminEndpoints] = None):
        super().__init__(proxy=proxy, http=http)
        self.endpoints = endpoints or GarminEndpoints()

    def login(self, credentials: Credentials) -> None:
        """Submit the SSO form and follow the returned redirect."""
        login_page = self.http.get(self.endpoints.login_url, params=dict(self.endpoints.login_params))

        try:
            form = HtmlForm.from_response(login_page, form_id=self.endpoints.login_form_id)
            form.set_by_id(self.endpoints.username_field_id, credentials.username)
            form.set_by_id(self.endpoints.password_field_id, credentials.password)
        except FormNotFoundError as e:
            raise AuthError(self.service, str(e)) from e

        form_result = form.submit(self.http)

        response_url = extract_response_url(form_result.text)
        if response_url is None:
            logger.warning("No response_url in SSO reply; login will be checked by the listing call")
            return
        self.http.get(response_url)
        logger.info(f"Submitted Garmin login for {credentials.username}")

    def list_activities(self, selector: DateSelector, save_dir: Path) -> List[ActivityRef]:
        """Get the 100 most recent activities.

        Older activities in the selected period are not visible.
        """
        response = self._get_listing()
        self.http.save(response, Path(save_dir) / self.endpoints.snapshot_name)

        try:
            entries = response.json()["results"]["activities"]
            refs = [self._to_ref(entry) for entry in entries]
        except (ValueError, KeyError, TypeError) as e:
            raise ListingError(f"unexpected Garmin activity listing: {e}") from e

        logger.info(f"Retrieved {len(refs)} activities")
        return refs

    def export_url(self, activity_id: str) -> str:
        return self.endpoints.tcx_export_url.format(id=activity_id)

    def _get_listing(self) -> requests.Response:
        try:
            response = self.http.get(self.endpoints.activities_url)
            response.raise_for_status()
            if not self.verified:
                response.json()
        except (ServiceConnectionError, requests.HTTPError, ValueError) as e:
            if not self.verified:
                logger.error(f"Activity listing failed right after login: {e}")
                raise AuthError(self.service, str(e)) from e
            if isinstance(e, ServiceConnectionError):
                raise
            raise ListingError(f"Garmin activity listing failed: {e}") from e

        self.verified = True
        return response

    def _to_ref(self, entry: dict) -> ActivityRef:
        try:
            activity = entry["activity"]
            activity_id = str(activity["activityId"])
            begin = from_epoch_millis(activity["beginTimestamp"]["millis"])
            name = (activity.get("activityName") or {}).get("value")
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ListingError(f"unexpected Garmin activity entry: {e}") from e

        logger.debug(f"activityId={activity_id} time={begin:%Y-%m-%d %H:%M} {name}")
        return ActivityRef(id=activity_id, begin=begin, name=name)
