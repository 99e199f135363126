"""Deterministic fallback embedding generator.

Turns text into a unit-length vector with a seeded pseudo-random sequence.
The vectors carry no semantic meaning; they only make the rest of the stack
usable without a real embedding model. Same text and dimension always give
the same output.
"""

import math

from chroma_admin.exceptions import EmbeddingGenerationError, InvalidArgumentError

DEFAULT_DIMENSION = 384

_LCG_MULTIPLIER = 9301
_LCG_INCREMENT = 49297
_LCG_MODULUS = 233280


def _to_int32(value: int) -> int:
    """Wrap an integer to the signed 32-bit range."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def _truncated_remainder(dividend: int, divisor: int) -> int:
    """Remainder whose sign follows the dividend."""
    remainder = abs(dividend) % divisor
    return -remainder if dividend < 0 else remainder


def _utf16_code_units(text: str) -> list[int]:
    # Lone surrogates are kept as single code units.
    data = text.encode("utf-16-le", "surrogatepass")
    return [data[i] | (data[i + 1] << 8) for i in range(0, len(data), 2)]


def text_seed(text: str) -> int:
    """Fold the text's UTF-16 code units into a signed 32-bit seed.

    Args:
        text: Input text. The empty string yields 0.

    Returns:
        Seed in the signed 32-bit range.
    """
    seed = 0
    for code in _utf16_code_units(text):
        seed = _to_int32((seed << 5) - seed + code)
    return seed


def generate_embedding(text: str, dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """Generate a deterministic unit-length embedding for text.

    Args:
        text: Text to embed.
        dimension: Number of components in the output vector.

    Returns:
        List of ``dimension`` floats with Euclidean norm 1.

    Raises:
        InvalidArgumentError: If dimension is smaller than 1.
        EmbeddingGenerationError: If the raw vector is all zeros and cannot
            be normalized.
    """
    if dimension < 1:
        raise InvalidArgumentError(
            f"Embedding dimension must be at least 1, got {dimension}",
            details={"dimension": dimension},
        )

    seed = text_seed(text)
    raw: list[float] = []
    for _ in range(dimension):
        seed = _truncated_remainder(seed * _LCG_MULTIPLIER + _LCG_INCREMENT, _LCG_MODULUS)
        value = seed / _LCG_MODULUS
        raw.append(value * 2 - 1)

    magnitude = math.sqrt(sum(component * component for component in raw))
    if magnitude == 0:
        raise EmbeddingGenerationError(
            "Cannot normalize an all-zero embedding",
            details={"dimension": dimension, "text_length": len(text)},
        )

    return [component / magnitude for component in raw]
