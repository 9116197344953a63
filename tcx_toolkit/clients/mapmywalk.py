"""MapMyWalk client implementation."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import requests

from tcx_toolkit.clients.base import BaseClient
from tcx_toolkit.exceptions import AuthError, FormNotFoundError, ListingError
from tcx_toolkit.http import HtmlForm
from tcx_toolkit.models import ActivityRef, Credentials, DateSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapMyWalkEndpoints:
    login_url: str = "https://www.mapmywalk.com/auth/login/"
    email_field_id: str = "id_email"
    password_field_id: str = "id_password"
    workouts_url: str = "http://www.mapmywalk.com/workouts/dashboard.json"
    tcx_export_url: str = "http://www.mapmywalk.com/workout/export/{id}/tcx"
    workout_path_prefix: str = "/workout/"
    workout_date_format: str = "%m/%d/%Y"
    snapshot_template: str = "workouts-{month_key}.json"


class MapMyWalkClient(BaseClient):
    """Client for MapMyWalk."""

    service = "mapmywalk"
    default_dir = "tcx-mapmywalk"

    def __init__(self, proxy=None, http=None, endpoints: Optional[MapMyWalkEndpoints] = None):
        super().__init__(proxy=proxy, http=http)
        self.endpoints = endpoints or MapMyWalkEndpoints()

    def login(self, credentials: Credentials) -> None:
        """Authenticate with MapMyWalk."""
        login_page = self.http.get(self.endpoints.login_url)

        try:
            form = HtmlForm.from_response(login_page)
            form.set_by_id(self.endpoints.email_field_id, credentials.username)
            form.set_by_id(self.endpoints.password_field_id, credentials.password)
            response = form.submit(self.http)
            response.raise_for_status()
        except (FormNotFoundError, requests.HTTPError) as e:
            logger.error(f"Login failed: {e}")
            raise AuthError(self.service, str(e)) from e

        self.verified = True
        logger.info(f"Successfully logged in as {credentials.username}")

    def list_activities(self, selector: DateSelector, save_dir: Path) -> List[ActivityRef]:
        """Get the workouts of the selected month.

        The dashboard only narrows by month; day matching is left to the caller.
        """
        params = {"month": str(selector.month), "year": str(selector.year)}
        response = self.http.get(self.endpoints.workouts_url, params=params)
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise ListingError(f"MapMyWalk workout listing failed: {e}") from e

        snapshot = self.endpoints.snapshot_template.format(month_key=selector.month_key)
        self.http.save(response, Path(save_dir) / snapshot)

        try:
            days = response.json()["workout_data"]["workouts"]
            refs = [self._to_ref(workout) for workouts in days.values() for workout in workouts]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ListingError(f"unexpected MapMyWalk workout listing: {e}") from e

        logger.info(f"Retrieved {len(refs)} workouts")
        return refs

    def export_url(self, activity_id: str) -> str:
        return self.endpoints.tcx_export_url.format(id=activity_id)

    def _to_ref(self, workout: dict) -> ActivityRef:
        view_url = workout["view_url"]
        workout_id = view_url.replace(self.endpoints.workout_path_prefix, "", 1)
        begin = datetime.strptime(workout["date"], self.endpoints.workout_date_format)
        logger.debug(f"workout_id={workout_id} date={begin:%Y-%m-%d}")
        return ActivityRef(id=workout_id, begin=begin, name=workout.get("name"))
