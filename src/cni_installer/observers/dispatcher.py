# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/cni_installer/observers/dispatcher.py
from __future__ import annotations
import logging
from typing import List, Optional, Protocol
from .events import BaseEvent

log = logging.getLogger("cni_installer")


class Observer(Protocol):
    def notify(self, event: BaseEvent) -> None: ...


class EventBus:
    def __init__(self, observers: Optional[List[Observer]] = None):
        self._observers = list(observers or [])

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def emit(self, event: BaseEvent) -> None:
        for ob in self._observers:
            try:
                ob.notify(event)
            except Exception:
                # a broken sink must not fail the install pass
                log.warning("observer %s failed on %s", type(ob).__name__,
                            type(event).__name__, exc_info=True)
