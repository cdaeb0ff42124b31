"""
Avocado API Client

Async client for the Avocado relationship API.
Docs: https://avocado.io/guacamole/avocado-api

Every call after login goes through AvocadoClient._request, which checks
the local request quota, sends the request with the session cookie and
signature, accounts for it, maps error statuses and decodes the body.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, SecretStr, ValidationError

from avocado_client import __version__
from avocado_client.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientSettings
from avocado_client.exceptions import (
    AuthenticationFailed,
    HttpFailure,
    InvalidResponse,
    NotFound,
    TransportFailure,
)
from avocado_client.models import (
    Activity,
    ActivityType,
    AvocadoList,
    Couple,
    ResponseShape,
    User,
)
from avocado_client.rate_limit import RateLimiter
from avocado_client.session import Session
from avocado_client.utils import to_epoch_seconds

logger = structlog.get_logger()

T = TypeVar("T", bound=BaseModel)

USER_AGENT = f"avocado-client/{__version__}"

LOGIN_PATH = "authentication/login"
LOGOUT_PATH = "authentication/logout"
USER_PATH = "user/"
COUPLE_PATH = "couple/"
ACTIVITIES_PATH = "activities/"
LISTS_PATH = "lists/"
CONVERSATION_PATH = "conversation/"
KISS_PATH = CONVERSATION_PATH + "kiss/"
HUG_PATH = CONVERSATION_PATH + "hug/"

USER_NOT_FOUND = "User not found or inaccessible to you"


def filter_activities(
    activities: Iterable[Activity],
    activity_type: ActivityType | str | None,
) -> list[Activity]:
    """
    Keep the activities whose type matches, preserving order.

    Matching is case-sensitive. A type that is not one of the known
    ActivityType values (or None) returns every activity.
    """
    activities = list(activities)
    try:
        wanted = ActivityType(activity_type)
    except ValueError:
        return activities
    return [activity for activity in activities if activity.type == wanted.value]


class AvocadoClient:
    """
    Client for the Avocado API.

    Create one per developer credential pair, log in, then call the
    endpoint methods. Use as an async context manager, or call aclose(),
    to release the underlying connection pool.

    Rate limiting is off by default. Pass a RateLimiter to enable it, or
    RateLimiter.shared() to share one enforced quota between clients.
    """

    def __init__(
        self,
        dev_id: str,
        dev_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.dev_id = dev_id
        self._dev_key = dev_key
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._session: Session | None = None

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AvocadoClient":
        """Build a client from ClientSettings."""
        return cls(
            dev_id=settings.dev_id,
            dev_key=settings.dev_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            rate_limiter=RateLimiter(
                max_requests=settings.max_requests,
                enabled=settings.rate_limit_enabled,
            ),
            transport=transport,
        )

    @property
    def session(self) -> Session | None:
        """The current login session, if any."""
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    @property
    def default_headers(self) -> dict[str, str]:
        """Return default headers for requests."""
        return {"User-Agent": USER_AGENT}

    def _clear_session(self) -> None:
        self._session = None
        if self._client is not None:
            self._client.cookies.clear()

    def get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.default_headers,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AvocadoClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Request pipeline
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        data: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        new_session: bool = False,
        uncounted: tuple[int, ...] = (),
    ) -> httpx.Response:
        """
        Check the quota, send one request and account for it.

        Args:
            new_session: drop the current session once the quota check
                passes, so the request goes out unauthenticated
            uncounted: statuses whose responses give the slot back
                instead of counting against the quota
        """
        reserved = self.rate_limiter.acquire()

        if new_session:
            self._clear_session()

        headers = self._session.headers if self._session else {}
        logger.debug("api_request", method=method, path=path, params=params)

        try:
            response = await self.get_client().request(
                method,
                path,
                data=data,
                params=params,
                headers=headers,
            )
        except httpx.RequestError as e:
            self.rate_limiter.release(reserved)
            logger.error("api_transport_error", method=method, path=path, error=str(e))
            raise TransportFailure(f"{method} {path} failed: {e}") from e
        except BaseException:
            # Cancelled, or failed outside httpx
            self.rate_limiter.release(reserved)
            raise

        if response.status_code in uncounted:
            self.rate_limiter.release(reserved)
        else:
            self.rate_limiter.commit(reserved)
        logger.debug("api_response", method=method, path=path, status=response.status_code)
        return response

    async def _request(
        self,
        path: str,
        shape: ResponseShape,
        model: type[T] | None = None,
        method: str | None = None,
        data: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        not_found: str | None = None,
    ) -> Any:
        """
        Run one API call through the pipeline.

        Args:
            path: Path relative to the base URL
            shape: How to decode the response body
            model: Pydantic model for OBJECT, FIRST and ARRAY shapes
            method: HTTP method; defaults to POST when data is given, else GET
            data: Form fields to send
            params: Query parameters
            not_found: Message for NotFound when the endpoint returns 404

        Returns:
            A model instance, a list of them, or a bool for STATUS

        Raises:
            RateLimitExceeded: quota reached, nothing was sent
            TransportFailure: the exchange did not complete
            NotFound: 404 on an endpoint with a not_found message
            HttpFailure: any other non-success status
            InvalidResponse: body does not match the expected shape
        """
        method = method or ("POST" if data is not None else "GET")
        response = await self._send(method, path, data=data, params=params)

        self._raise_for_status(response, not_found)

        if shape is ResponseShape.STATUS:
            return response.status_code == httpx.codes.OK

        if model is None:
            raise ValueError(f"A model is required to decode {shape.name} responses")

        return self._decode(response, shape, model)

    def _raise_for_status(self, response: httpx.Response, not_found: str | None = None) -> None:
        if response.is_success:
            return

        url = str(response.request.url)
        logger.warning("api_error", url=url, status=response.status_code)

        if response.status_code == httpx.codes.NOT_FOUND and not_found:
            raise NotFound(not_found, url=url)
        raise HttpFailure(response.status_code, url=url)

    @staticmethod
    def _decode(response: httpx.Response, shape: ResponseShape, model: type[T]) -> T | list[T]:
        try:
            body = response.json()
        except ValueError as e:
            raise InvalidResponse(f"Response from {response.request.url} is not JSON") from e

        try:
            if shape is ResponseShape.OBJECT:
                if not isinstance(body, dict):
                    raise InvalidResponse(f"Expected a JSON object, got {type(body).__name__}")
                return model.model_validate(body)

            if not isinstance(body, list):
                raise InvalidResponse(f"Expected a JSON array, got {type(body).__name__}")

            if shape is ResponseShape.FIRST:
                if not body:
                    raise InvalidResponse("Expected a non-empty JSON array")
                return model.model_validate(body[0])

            return [model.model_validate(item) for item in body]
        except ValidationError as e:
            raise InvalidResponse(f"Unexpected {model.__name__} data: {e}") from e

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self, email: str, password: str | SecretStr) -> bool:
        """
        Authenticate with the user's email and password.

        On success the session cookie and the derived X-AvoSig signature
        are attached to every later request.

        A SecretStr password only keeps the value out of reprs and logs; it
        is unwrapped to a plain string to build the form and offers no
        in-memory protection.

        Returns:
            True if the server answered 200 with a session cookie;
            False if it answered 2xx without one

        Any previous session is dropped once the quota check passes. A
        rejected login (400) does not count against the quota.

        Raises:
            RateLimitExceeded: quota reached, nothing was sent and the
                previous session is kept
            AuthenticationFailed: the server rejected the credentials
            HttpFailure: any other non-success status
        """
        if isinstance(password, SecretStr):
            password = password.get_secret_value()

        response = await self._send(
            "POST",
            LOGIN_PATH,
            data={"email": email, "password": password},
            new_session=True,
            uncounted=(httpx.codes.BAD_REQUEST,),
        )

        if response.status_code == httpx.codes.BAD_REQUEST:
            logger.warning("login_failed", email=email)
            raise AuthenticationFailed("Bad username or password")

        self._raise_for_status(response)

        set_cookie = response.headers.get_list("set-cookie")
        if not set_cookie:
            logger.warning("login_missing_cookie", email=email, status=response.status_code)
            return False

        try:
            self._session = Session.from_set_cookie(email, set_cookie[0], self.dev_id, self._dev_key)
        except ValueError as e:
            raise InvalidResponse(str(e)) from e

        logger.info("login_succeeded", email=email, cookie=self._session.cookie_name)
        return response.status_code == httpx.codes.OK

    async def logout(self) -> bool:
        """
        Log the current user out.

        The local session is dropped once the server has answered, so later
        requests are sent unauthenticated.
        """
        response = await self._send("GET", LOGOUT_PATH)

        email = self._session.email if self._session else None
        self._clear_session()
        logger.info("logout", email=email, status=response.status_code)

        self._raise_for_status(response)
        return response.status_code == httpx.codes.OK

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def current_user(self) -> User:
        """Get the logged-in user."""
        return await self._request(USER_PATH, ResponseShape.FIRST, User)

    async def user(self, user_id: str) -> User:
        """
        Get a user by id.

        Raises:
            NotFound: if the user does not exist or is not visible to you
        """
        return await self._request(
            USER_PATH + user_id,
            ResponseShape.FIRST,
            User,
            not_found=USER_NOT_FOUND,
        )

    async def couple(self) -> Couple:
        """
        Get the couple the logged-in user belongs to.

        The couple holds both users, so calling this instead of
        current_user() saves a request.
        """
        return await self._request(COUPLE_PATH, ResponseShape.OBJECT, Couple)

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    async def activities(self) -> list[Activity]:
        """Get the 100 most recent activities."""
        return await self._request(ACTIVITIES_PATH, ResponseShape.ARRAY, Activity)

    async def activities_by_type(self, activity_type: ActivityType | str | None) -> list[Activity]:
        """Get the 100 most recent activities, keeping only one type."""
        return filter_activities(await self.activities(), activity_type)

    async def activities_after(self, time: datetime | int | float) -> list[Activity]:
        """Get activities after a point in time."""
        return await self._request(
            ACTIVITIES_PATH,
            ResponseShape.ARRAY,
            Activity,
            params={"after": to_epoch_seconds(time)},
        )

    async def activities_before(self, time: datetime | int | float) -> list[Activity]:
        """Get activities before a point in time, for paging past the most recent 100."""
        return await self._request(
            ACTIVITIES_PATH,
            ResponseShape.ARRAY,
            Activity,
            params={"before": to_epoch_seconds(time)},
        )

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    async def message(self, text: str) -> bool:
        """Send a message to the other user in the couple."""
        return await self._request(CONVERSATION_PATH, ResponseShape.STATUS, data={"message": text})

    async def hug(self) -> bool:
        return await self._request(HUG_PATH, ResponseShape.STATUS, method="POST")

    async def kiss(self) -> bool:
        return await self._request(KISS_PATH, ResponseShape.STATUS, method="POST")

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    async def lists(self) -> list[AvocadoList]:
        return await self._request(LISTS_PATH, ResponseShape.ARRAY, AvocadoList)

    async def get_list(self, list_id: str) -> AvocadoList:
        return await self._request(LISTS_PATH + list_id, ResponseShape.FIRST, AvocadoList)

    async def create_list(self, name: str) -> bool:
        return await self._request(LISTS_PATH, ResponseShape.STATUS, data={"name": name})

    async def rename_list(self, list_id: str, name: str) -> bool:
        return await self._request(LISTS_PATH + list_id, ResponseShape.STATUS, data={"name": name})

    async def delete_list(self, list_id: str) -> bool:
        return await self._request(f"{LISTS_PATH}{list_id}/delete", ResponseShape.STATUS, method="POST")
