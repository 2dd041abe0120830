"""
Small literal/segment router used as the default ``Router`` service.

Routes come from ``Config["router"]["routes"]``:

    {"user": {"route": "/users/:id",
              "defaults": {"controller": "Users", "action": "show"},
              "methods": ["GET"]}}

Segments starting with ``:`` capture a single path segment. Routes are
tried in registration order; the first match wins.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from core.errors import RivetConfigError
from mvc.http import Request


@dataclass
class RouteMatch:
    """Outcome of a successful match."""

    route_name: str
    params: Dict[str, Any] = field(default_factory=dict)

    def get_param(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)


@dataclass
class Route:
    name: str
    pattern: str
    defaults: Dict[str, Any] = field(default_factory=dict)
    methods: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if not self.pattern.startswith("/"):
            raise RivetConfigError(
                f"Route '{self.name}' must start with '/': {self.pattern!r}",
                config_key=f"router.routes.{self.name}",
                actual_value=self.pattern,
            )
        self._segments = _split(self.pattern)
        if self.methods is not None:
            self.methods = [m.upper() for m in self.methods]

    def match(self, request: Request) -> Optional[RouteMatch]:
        if self.methods is not None and request.method not in self.methods:
            return None
        segments = _split(request.path)
        if len(segments) != len(self._segments):
            return None
        captured: Dict[str, Any] = {}
        for expected, actual in zip(self._segments, segments):
            if expected.startswith(":"):
                captured[expected[1:]] = actual
            elif expected != actual:
                return None
        return RouteMatch(route_name=self.name, params={**self.defaults, **captured})


def _split(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


class Router:
    """Ordered route table."""

    def __init__(self, routes: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._routes: Dict[str, Route] = {}
        for name, definition in (routes or {}).items():
            self.add_route(name, definition)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Router":
        return cls(config.get("router", {}).get("routes", {}))

    def add_route(self, name: str, definition: Mapping[str, Any]) -> Route:
        if "route" not in definition:
            raise RivetConfigError(
                f"Route '{name}' has no 'route' pattern",
                config_key=f"router.routes.{name}",
            )
        route = Route(
            name=name,
            pattern=definition["route"],
            defaults=dict(definition.get("defaults", {})),
            methods=definition.get("methods"),
        )
        self._routes[name] = route
        return route

    @property
    def routes(self) -> List[Route]:
        return list(self._routes.values())

    def match(self, request: Request) -> Optional[RouteMatch]:
        for route in self._routes.values():
            route_match = route.match(request)
            if route_match is not None:
                return route_match
        return None
