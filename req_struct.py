from enum import Enum
from typing import Optional
from dataclasses import dataclass, field
from errors import InvalidMethodError


class HttpMethod(Enum):
    # HttpMethod {{{
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def to_transport(self) -> str:
        """
        Method token as handed to requests
        """
        return self.value

    @classmethod
    def from_transport(cls, token: str) -> "HttpMethod":
        """
        Inverse of to_transport. Anything outside of the
        four supported verbs is an error, never a default.
        """
        for method in cls:
            if method.value == token:
                return method
        raise InvalidMethodError(token)

    def index(self) -> int:
        return list(HttpMethod).index(self)

    @classmethod
    def from_index(cls, index: int) -> "HttpMethod":
        methods = list(cls)
        return methods[index % len(methods)]
    # }}}


@dataclass
class HttpRequest():
    # HttpRequest {{{
    url: str = ""
    method: str = HttpMethod.GET.to_transport()
    headers: list[tuple[str, str]] = field(default_factory=list)
    params: list[tuple[str, str]] = field(default_factory=list)
    body: Optional[str] = None

    def summary(self) -> str:
        url = self.url if self.url != "" else "<no URL>"
        body = "Yes" if self.body is not None else "No"
        return f"{self.method} {url} " + \
            f"(Headers: {len(self.headers)}, " + \
            f"Params: {len(self.params)}, Body: {body})"

    def __str__(self) -> str:
        metadata = f"{self.method} {self.url}\n"
        headers = "".join(f"{k}: {v}\n" for k, v in self.headers)
        body = f"{self.body}\n" if self.body is not None else ""
        return metadata + headers + body
    # }}}


@dataclass
class HttpResponse():
    # HttpResponse {{{
    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: str = ""

    def header(self, name: str) -> Optional[str]:
        """
        Case-insensitive lookup, first match wins
        """
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    def content_type(self) -> Optional[str]:
        return self.header("Content-Type")

    def content_length(self) -> Optional[int]:
        value = self.header("Content-Length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def is_json(self) -> bool:
        content_type = self.content_type()
        return content_type is not None and \
            "application/json" in content_type.lower()

    def is_xml(self) -> bool:
        content_type = self.content_type()
        if content_type is None:
            return False
        content_type = content_type.lower()
        return "application/xml" in content_type or \
            "text/xml" in content_type
    # }}}
