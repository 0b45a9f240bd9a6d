"""
Forwarding route descriptor.

A ForwardRoute states everything the forwarder needs to know about one
inbound endpoint: which backend path it maps to, how the caller proves
who they are, how the body and response are reshaped, and what happens
when the backend is unavailable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

BodyTransform = Callable[[Any], Any]
ResponseTransform = Callable[[Any], Any]


class AuthPolicy(str, Enum):
    """Credential policy of a forwarding route."""

    NONE = "none"
    # Forward the Authorization header when present, never reject
    BEARER_OPTIONAL = "bearer-optional"
    BEARER_REQUIRED = "bearer-required"
    # Cookie "token" becomes "Authorization: Bearer <token>"
    COOKIE_REQUIRED = "cookie-required"
    # "authToken" from the JSON body or query string, then the bearer header
    BODY_TOKEN = "body-token"


class BodyMode(str, Enum):
    NONE = "none"
    JSON = "json"


class BackendErrorPolicy(str, Enum):
    """What a route does when the backend is unreachable or answers 5xx."""

    FAIL = "fail"
    SERVE_FALLBACK = "serveFallback"


@dataclass(frozen=True)
class ForwardRoute:
    method: str
    path: str
    target: str
    auth: AuthPolicy = AuthPolicy.BEARER_REQUIRED
    body: BodyMode = BodyMode.NONE
    body_transform: Optional[BodyTransform] = None
    response_transform: Optional[ResponseTransform] = None
    error_message: str = "Backend request failed"
    unauthorized_message: str = "Authorization required"
    failure_message: str = "Internal server error"
    forward_query: bool = False
    fixed_query: Dict[str, str] = field(default_factory=dict)
    query_defaults: Dict[str, str] = field(default_factory=dict)
    forward_cookies: bool = False
    relay_set_cookie: bool = False
    binary_passthrough: bool = False
    on_backend_error: BackendErrorPolicy = BackendErrorPolicy.FAIL
    fallback: Optional[Callable[[], Dict[str, Any]]] = None
    name: Optional[str] = None

    def __post_init__(self):
        if self.on_backend_error is BackendErrorPolicy.SERVE_FALLBACK and self.fallback is None:
            raise ValueError(f"{self.method} {self.path}: fallback policy without fallback data")

    @property
    def endpoint_name(self) -> str:
        if self.name:
            return self.name
        slug = self.path.strip("/").replace("/", "_").replace("{", "").replace("}", "")
        return f"{self.method.lower()}_{slug}"

    def resolve_target(self, path_params: Dict[str, str]) -> str:
        """Fill the backend path template from inbound path parameters."""
        return self.target.format(
            **{key: quote(str(value), safe="") for key, value in path_params.items()}
        )
