from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from ..core.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from ..core.exceptions import TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff for store calls.

    Only TransientStoreError is retried; domain errors surface immediately.
    """

    attempts: int = DEFAULT_RETRY_ATTEMPTS
    base_delay: float = DEFAULT_RETRY_DELAY_SECONDS
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        attempts = max(int(self.attempts), 1)
        last_error: TransientStoreError | None = None

        for attempt in range(attempts):
            try:
                return fn(*args, **kwargs)
            except TransientStoreError as e:
                last_error = e
                if attempt < attempts - 1:
                    wait_time = self.base_delay * (2 ** attempt)
                    logger.warning(
                        "Store call %s failed (attempt %d/%d), retrying in %.2fs: %s",
                        getattr(fn, "__name__", fn), attempt + 1, attempts, wait_time, e,
                    )
                    self.sleep(wait_time)
                else:
                    logger.error("Store call %s failed after %d attempts: %s", getattr(fn, "__name__", fn), attempts, e)

        raise last_error


NO_RETRY = RetryPolicy(attempts=1, base_delay=0.0)
