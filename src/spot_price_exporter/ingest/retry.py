"""
リトライポリシー

取得・書き込みの一時的な失敗に対して、ジッタ付き指数バックオフでリトライする。
"""

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from spot_price_exporter.core.config import settings
from spot_price_exporter.core.errors import ExportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """リトライ対象のエラーかどうか"""
    return isinstance(error, ExportError) and error.retryable


class RetryPolicy:
    """ジッタ付き指数バックオフのリトライポリシー"""

    def __init__(
        self,
        attempts: int = settings.retry_attempts,
        base_delay: float = settings.retry_base_delay,
        max_delay: float = settings.retry_max_delay,
        jitter: float = settings.retry_jitter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.attempts = attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.sleep = sleep

    def _retrying(self) -> Retrying:
        return Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.base_delay, max=self.max_delay)
            + wait_random(0, self.jitter),
            retry=retry_if_exception(is_retryable),
            sleep=self.sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """
        関数をリトライ付きで実行

        最終試行でも失敗した場合は元の例外をそのまま送出する。
        """
        return self._retrying()(fn, *args, **kwargs)
