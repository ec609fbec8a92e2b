"""단계별 처리 시간 측정."""

import time
from contextlib import contextmanager

from loguru import logger


@contextmanager
def timer(stage: str):
    """블록 실행 시간을 ms 단위로 재고 DEBUG 로그로 남긴다.

    사용법:
        with timer("transform") as t:
            ...
        t.elapsed_ms
    """
    t = _Elapsed()
    start = time.perf_counter()
    try:
        yield t
    finally:
        t.elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{stage} took {t.elapsed_ms:.1f}ms")


class _Elapsed:
    elapsed_ms: float = 0.0
