"""LearnHub API client.

Each `LearnHubClient` owns one `httpx.AsyncClient`, its query cache and its
notifier; nothing is shared between instances.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from learnhub.client.cache import (
    COURSES,
    USER_COURSE_PROGRESS,
    USERS,
    QueryCache,
    Tag,
    cache_key,
)
from learnhub.client.notifier import LogNotifier, Notifier
from learnhub.client.results import FETCH_ERROR, ApiError, ApiResult


logger = structlog.get_logger(__name__)

TokenProvider = Callable[[], Awaitable[str | None]]

DEFAULT_TIMEOUT = 30.0


class LearnHubClient:
    """Typed access to every LearnHub endpoint.

    Usage:
        async with LearnHubClient(base_url, token_provider=get_token) as api:
            result = await api.get_courses(category="all")
            if result.ok:
                courses = result.data
    """

    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        notifier: Notifier | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        cache: QueryCache | None = None,
    ) -> None:
        self._token_provider = token_provider
        self.notifier = notifier or LogNotifier()
        self.cache = cache or QueryCache()
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "LearnHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ==========================================================================
    # Request plumbing
    # ==========================================================================

    async def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._token_provider is not None:
            token = await self._token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> ApiResult:
        """Issue a call and normalize its outcome into an `ApiResult`."""
        method = method.upper()
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            headers = await self._headers()
        except Exception as e:
            logger.warning("client_token_error", method=method, path=path, error=str(e))
            return ApiResult(error=ApiError(status=FETCH_ERROR, message=str(e)))

        try:
            response = await self._http.request(
                method,
                path.lstrip("/"),
                params=params or None,
                json=json_body,
                data=data,
                files=files,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning("client_fetch_error", method=method, path=path, error=str(e))
            return ApiResult(error=ApiError(status=FETCH_ERROR, message=str(e)))

        if response.status_code == httpx.codes.NO_CONTENT:
            return ApiResult(data=None)

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        if response.is_error:
            message = None
            if isinstance(body, dict):
                message = body.get("message")
            message = message or str(response.status_code)
            self.notifier.error(f"Error: {message}")
            logger.info(
                "client_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            return ApiResult(
                error=ApiError(status=response.status_code, message=message, data=body)
            )

        if not isinstance(body, dict):
            return ApiResult(data=body)

        if method != "GET" and body.get("message"):
            self.notifier.success(body["message"])
        return ApiResult(data=body.get("data"))

    async def _query(
        self,
        endpoint: str,
        args: Any,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        tags: tuple[Tag, ...] = (),
        refetch: bool = False,
    ) -> ApiResult:
        key = cache_key(endpoint, args)
        if not refetch and key in self.cache:
            return ApiResult(data=self.cache.get(key))

        result = await self.request("GET", path, params=params)
        if result.ok:
            self.cache.set(key, result.data, tags)
        return result

    async def _mutation(
        self,
        method: str,
        path: str,
        *,
        invalidates: tuple[Tag, ...] = (),
        **kwargs: Any,
    ) -> ApiResult:
        result = await self.request(method, path, **kwargs)
        if invalidates:
            self.cache.invalidate(invalidates)
        return result

    # ==========================================================================
    # Users
    # ==========================================================================

    async def update_user(self, user_id: str, **fields: Any) -> ApiResult:
        """Update identity-provider profile fields (e.g. `publicMetadata`)."""
        return await self._mutation(
            "PUT", f"users/clerk/{user_id}", json_body=fields, invalidates=(USERS,)
        )

    # ==========================================================================
    # Courses
    # ==========================================================================

    async def get_courses(
        self, category: str | None = None, *, refetch: bool = False
    ) -> ApiResult:
        return await self._query(
            "get_courses",
            {"category": category},
            "courses",
            params={"category": category},
            tags=(COURSES,),
            refetch=refetch,
        )

    async def get_course(self, course_id: str, *, refetch: bool = False) -> ApiResult:
        return await self._query(
            "get_course",
            course_id,
            f"courses/{course_id}",
            tags=((COURSES, course_id),),
            refetch=refetch,
        )

    async def create_course(self, teacher_id: str, teacher_name: str) -> ApiResult:
        return await self._mutation(
            "POST",
            "courses",
            json_body={"teacherId": teacher_id, "teacherName": teacher_name},
            invalidates=(COURSES,),
        )

    async def update_course(
        self,
        course_id: str,
        fields: dict[str, Any],
        image: tuple[str, bytes, str] | None = None,
    ) -> ApiResult:
        """Update a course.

        With an `image` (filename, content, content type) the patch is sent as
        a multipart form and `sections` is JSON-encoded into a form field.
        """
        if image is None:
            kwargs: dict[str, Any] = {"json_body": fields}
        else:
            form = {
                key: json.dumps(value) if isinstance(value, list | dict) else str(value)
                for key, value in fields.items()
                if value is not None
            }
            kwargs = {"data": form, "files": {"image": image}}
        return await self._mutation(
            "PUT",
            f"courses/{course_id}",
            invalidates=((COURSES, course_id),),
            **kwargs,
        )

    async def delete_course(self, course_id: str) -> ApiResult:
        return await self._mutation(
            "DELETE", f"courses/{course_id}", invalidates=(COURSES,)
        )

    async def get_upload_video_url(
        self,
        course_id: str,
        section_id: str,
        chapter_id: str,
        file_name: str,
        file_type: str,
    ) -> ApiResult:
        return await self._mutation(
            "POST",
            f"courses/{course_id}/sections/{section_id}"
            f"/chapters/{chapter_id}/get-upload-url",
            json_body={"fileName": file_name, "fileType": file_type},
        )

    # ==========================================================================
    # Transactions
    # ==========================================================================

    async def get_transactions(self, user_id: str, *, refetch: bool = False) -> ApiResult:
        return await self._query(
            "get_transactions",
            user_id,
            "transactions",
            params={"userId": user_id},
            refetch=refetch,
        )

    async def create_stripe_payment_intent(self, amount: int) -> ApiResult:
        return await self._mutation(
            "POST", "transactions/stripe/payment-intent", json_body={"amount": amount}
        )

    async def create_transaction(self, transaction: dict[str, Any]) -> ApiResult:
        return await self._mutation("POST", "transactions", json_body=transaction)

    # ==========================================================================
    # Course progress
    # ==========================================================================

    async def get_user_enrolled_courses(
        self, user_id: str, *, refetch: bool = False
    ) -> ApiResult:
        return await self._query(
            "get_user_enrolled_courses",
            user_id,
            f"users/course-progress/{user_id}/enrolled-courses",
            tags=(COURSES, USER_COURSE_PROGRESS),
            refetch=refetch,
        )

    async def get_user_course_progress(
        self, user_id: str, course_id: str, *, refetch: bool = False
    ) -> ApiResult:
        return await self._query(
            "get_user_course_progress",
            {"userId": user_id, "courseId": course_id},
            f"users/course-progress/{user_id}/courses/{course_id}",
            tags=(USER_COURSE_PROGRESS,),
            refetch=refetch,
        )

    async def update_user_course_progress(
        self,
        user_id: str,
        course_id: str,
        sections: list[dict[str, Any]],
    ) -> ApiResult:
        """Update progress, patching the cached copy before the call returns.

        The patch is undone if the call fails; on success the cached entry
        becomes the server's response.
        """
        key = cache_key("get_user_course_progress", {"userId": user_id, "courseId": course_id})
        patch = self.cache.update_query_data(
            key, lambda draft: {**(draft or {}), "sections": sections}
        )

        result = await self.request(
            "PUT",
            f"users/course-progress/{user_id}/courses/{course_id}",
            json_body={"sections": sections},
        )

        if not result.ok:
            patch.undo()
            return result

        self.cache.invalidate((USER_COURSE_PROGRESS,))
        if result.data is not None:
            self.cache.set(key, result.data, (USER_COURSE_PROGRESS,))
        return result
