"""
Sends the final response once, at the end of ``finish``.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from events.listener import AbstractListenerAggregate
from mvc.http import Response
from mvc.mvc_event import MvcEvent

logger = logging.getLogger("rivet.mvc.send_response")

ResponseSender = Callable[[Response], None]


class SendResponseListener(AbstractListenerAggregate):
    """Hands the response to ``sender`` (if any) and marks it sent."""

    priority = -10000

    def __init__(self, sender: Optional[ResponseSender] = None) -> None:
        super().__init__()
        self.sender = sender

    def attach(self, events) -> None:
        self.listeners.append(
            events.attach(MvcEvent.EVENT_FINISH, self.on_finish, self.priority)
        )

    def on_finish(self, event: MvcEvent) -> Optional[Response]:
        response = event.response
        if response is None or response.sent:
            return response
        if self.sender is not None:
            self.sender(response)
        response.sent = True
        logger.debug(f"Response sent with status {response.status_code}")
        return response
