#!/usr/bin/env python

"""
    Member notifications for Circulation.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import abc
import logging
from circulation.schemas import Notification

logger = logging.getLogger(__name__)


class Notifier(abc.ABC):
    """Tells members about queue events. Implementations must not block."""

    @abc.abstractmethod
    def send(self, notification: Notification) -> None: ...


class LogNotifier(Notifier):

    def send(self, notification):
        logger.info(f"[notify] member={notification.member_id} {notification.type}: {notification.message}")
