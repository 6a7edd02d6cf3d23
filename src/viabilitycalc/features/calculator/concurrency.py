from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, TypeVar

_T = TypeVar("_T")

# Export rendering is the only work pushed off the event loop; keep the pool small.
_EXECUTOR = ThreadPoolExecutor(max_workers=2, thread_name_prefix="viability-export")


async def run_blocking(func: Callable[..., _T], /, *args: Any, **kwargs: Any) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(_EXECUTOR, partial(func, *args, **kwargs))
