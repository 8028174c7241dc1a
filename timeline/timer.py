# timeline/timer.py
import pygame
from typing import Callable, Optional

class PygameTickTimer:
    """Recurring tick on the pygame event queue.

    The main loop passes every event to handle(); after cancel() any event
    still sitting in the queue is ignored. Each timer posts its own event
    type, so a tick queued by a cancelled timer never reaches its successor.
    """
    def __init__(self, callback: Callable[[], None], period_ms: int, event_type: Optional[int] = None):
        self.callback = callback
        self.period_ms = int(period_ms)
        self.event_type = pygame.event.custom_type() if event_type is None else event_type
        self.active = True
        pygame.time.set_timer(self.event_type, self.period_ms)

    def cancel(self):
        if not self.active:
            return
        self.active = False
        pygame.time.set_timer(self.event_type, 0)

    def handle(self, e: pygame.event.Event) -> bool:
        if e.type != self.event_type:
            return False
        if self.active:
            self.callback()
        return True
