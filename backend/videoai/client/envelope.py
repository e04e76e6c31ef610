from typing import Any, Callable, Generic, Optional, TypeVar

import requests

T = TypeVar("T")
GENERIC_ERROR = "An error occurred"


class ApiResponse(Generic[T]):
    """
    result of every client call: exactly one of data or error.
    expected failures (validation, server errors, unreachable server) travel
    here instead of being raised.
    """

    __slots__ = ("data", "error")

    def __init__(self, data: Optional[T] = None, error: Optional[str] = None):
        if (data is None) == (error is None):
            raise ValueError("ApiResponse needs exactly one of data or error")
        self.data = data
        self.error = error

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: str) -> "ApiResponse[T]":
        return cls(error=error or GENERIC_ERROR)

    @property
    def ok(self) -> bool:
        return self.error is None

    def map(self, func: Callable[[T], Any]) -> "ApiResponse":
        """transform the payload of a success, pass failures through"""
        if not self.ok:
            return self
        return ApiResponse.success(func(self.data))

    def __eq__(self, other):
        return isinstance(other, ApiResponse) and (self.data, self.error) == (other.data, other.error)

    def __repr__(self):
        if self.ok:
            return f"ApiResponse(data={self.data!r})"
        return f"ApiResponse(error={self.error!r})"


def handle_response(response: requests.Response) -> ApiResponse:
    """normalise a transport response into the envelope"""
    content_type = response.headers.get("content-type", "")
    is_json = "application/json" in content_type

    if not response.ok:
        message = None
        if is_json:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("message")
        return ApiResponse.failure(message or GENERIC_ERROR)

    # malformed json on a success is not an expected failure and propagates
    data = response.json() if is_json else response.text
    # an empty or null body still counts as data
    return ApiResponse.success(data if data is not None else "")
