"""
Default MVC listeners, attached by name during Application.bootstrap().
"""
from mvc.listeners.dispatch import DispatchListener
from mvc.listeners.http_method import HttpMethodListener
from mvc.listeners.route import RouteListener
from mvc.listeners.send_response import ResponseSender, SendResponseListener

__all__ = [
    "DispatchListener",
    "HttpMethodListener",
    "ResponseSender",
    "RouteListener",
    "SendResponseListener",
]
