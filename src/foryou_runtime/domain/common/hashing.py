from __future__ import annotations

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
UINT32_MASK = 0xFFFFFFFF


def stable_hash(value: str) -> int:
    """32-bit FNV-1a over UTF-16 code units, stable across processes."""
    h = FNV_OFFSET_BASIS
    encoded = value.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        h ^= encoded[i] | (encoded[i + 1] << 8)
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def stable_hash_hex(value: str) -> str:
    return f"{stable_hash(value):08x}"


def seeded_jitter(seed: str, spread: float) -> float:
    """Deterministic value in [-spread/2, spread/2] derived from ``seed``."""
    normalized = stable_hash(seed) / UINT32_MASK
    return (normalized - 0.5) * spread
