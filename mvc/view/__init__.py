from mvc.view.manager import ViewManager
from mvc.view.strategies import (
    DefaultRenderingStrategy,
    ExceptionStrategy,
    RouteNotFoundStrategy,
    render_result,
)

__all__ = [
    "DefaultRenderingStrategy",
    "ExceptionStrategy",
    "RouteNotFoundStrategy",
    "ViewManager",
    "render_result",
]
