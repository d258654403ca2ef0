# authgate/common/util.py
from __future__ import annotations
import time

def now_ms() -> int:
    return int(time.time() * 1000)

def human_ts_ms(ts_ms: int) -> str:
    if not ts_ms:
        return "-"
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(ts_ms / 1000))

def human_age(ms: int) -> str:
    sign = "-" if ms < 0 else ""
    s = abs(ms) // 1000
    h, rem = divmod(s, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{sign}{h}h{m:02d}m{s:02d}s"
    if m:
        return f"{sign}{m}m{s:02d}s"
    return f"{sign}{s}s"
