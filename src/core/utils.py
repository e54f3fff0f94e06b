def fmt_ms(ms: int) -> str:
    """Format milliseconds as m:ss (negative values clamp to 0:00)."""
    ms = max(0, int(ms))
    s = ms // 1000
    m = s // 60
    s = s % 60
    return f"{m}:{s:02d}"


def clamp(value: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, value))
