"""
Minimal request/response value objects.

Transport is out of scope: a Request is whatever the caller builds before
init(), and a Response is handed to the configured ResponseSender.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Request:
    """Inbound request."""

    method: str = "GET"
    path: str = "/"
    headers: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, Any] = field(default_factory=dict)
    body: Optional[Any] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


@dataclass(eq=False)
class Response:
    """Outbound response, mutated by listeners until it is sent."""

    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    content: str = ""
    sent: bool = False

    def set_header(self, name: str, value: str) -> "Response":
        self.headers[name] = value
        return self

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600
