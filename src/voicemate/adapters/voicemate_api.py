"""Voice Mate API adapter - HTTP client for tasks, timetable and diary."""

import logging
from datetime import date

import requests

from voicemate.config import Config, load_config
from voicemate.core.tasks import DiaryEntry, ScheduleItem, Task

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Raised when the Voice Mate API returns an error or is unreachable."""

    pass


class AuthenticationError(ApiError):
    """Raised when sign-in fails or the session is rejected."""

    pass


class VoiceMateAPI:
    """
    Voice Mate REST API adapter.

    Implements TaskRepository protocol. Signs in lazily when credentials are
    configured and keeps the session cookie. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        self.base_url = self.config.api_base_url.rstrip("/")
        self._session = session or requests.Session()
        self._signed_in = False

    def _ensure_signed_in(self) -> None:
        """Sign in once if credentials are configured."""
        if self._signed_in or not self.config.api_username:
            return
        self.sign_in(self.config.api_username, self.config.api_password)

    def sign_in(self, username: str, password: str) -> None:
        try:
            resp = self._session.post(
                f"{self.base_url}/api/auth/signin",
                json={"username": username, "password": password},
                timeout=DEFAULT_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ApiError(f"Voice Mate API unreachable: {e}") from e

        if resp.status_code != 200:
            raise AuthenticationError(f"Sign-in failed: {_error_message(resp)}")
        self._signed_in = True
        logger.info(f"Signed in to {self.base_url} as {username}")

    def _request(self, method: str, endpoint: str, payload: dict | None = None) -> dict | list:
        """Make an API request, returning the decoded JSON body."""
        self._ensure_signed_in()
        try:
            resp = self._session.request(
                method,
                f"{self.base_url}{endpoint}",
                json=payload,
                timeout=DEFAULT_TIMEOUT,
            )
        except requests.RequestException as e:
            raise ApiError(f"Voice Mate API unreachable: {e}") from e

        if resp.status_code == 401:
            self._signed_in = False
            raise AuthenticationError("Not signed in. Set API_USERNAME and API_PASSWORD in voicemate.conf")
        if resp.status_code >= 400:
            raise ApiError(f"{method} {endpoint} failed ({resp.status_code}): {_error_message(resp)}")
        return resp.json()

    def fetch_tasks(self) -> list[Task]:
        """Fetch all tasks on the board."""
        return [Task.from_api(t) for t in self._request("GET", "/api/tasks")]

    def fetch_schedule(self) -> list[ScheduleItem]:
        """Fetch all timetable items."""
        return [ScheduleItem.from_api(i) for i in self._request("GET", "/api/schedule")]

    def fetch_diary(self, target_date: date) -> list[DiaryEntry]:
        """Fetch diary entries for a date."""
        entries = self._request("GET", f"/api/diary/{target_date.isoformat()}")
        return [DiaryEntry.from_api(e) for e in entries]

    def create_task(self, payload: dict) -> Task:
        """Create a task from a request body."""
        return Task.from_api(self._request("POST", "/api/tasks", payload))

    def create_diary_entry(self, payload: dict) -> DiaryEntry:
        """Create a diary entry from a request body."""
        return DiaryEntry.from_api(self._request("POST", "/api/diary", payload))


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return resp.text
