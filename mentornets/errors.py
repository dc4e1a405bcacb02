"""Error hierarchy for buffers, matrices and mentor configuration."""

from __future__ import annotations


class MentorNetsError(Exception):
    """Base class for every error raised by mentornets.

    Errors carry an optional ``annotation`` naming the operation that
    triggered them.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.annotation: str | None = None

    def with_annotation(self, annotation: str) -> "MentorNetsError":
        self.annotation = annotation
        return self

    def __str__(self) -> str:
        if self.annotation:
            return f"{self.message} ({self.annotation})"
        return self.message

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.args == other.args and vars(self) == vars(other)

    __hash__ = Exception.__hash__


class ZeroSizedBuffer(MentorNetsError):
    def __init__(self) -> None:
        super().__init__("attempted to create a zero-sized buffer")


class TooFewValues(MentorNetsError):
    def __init__(self, expected_min: int, actual: int) -> None:
        super().__init__(
            f"too few values provided for buffer creation: "
            f"expected at least {expected_min}, got {actual}"
        )
        self.expected_min = expected_min
        self.actual = actual


class UnmatchingBiasValue(MentorNetsError):
    def __init__(self, expected: float, actual: float) -> None:
        super().__init__(
            f"user provided bias value {actual} does not match expected {expected}"
        )
        self.expected = float(expected)
        self.actual = float(actual)


class UnmatchingBufferSizes(MentorNetsError):
    def __init__(self, lhs: int, rhs: int) -> None:
        super().__init__(f"unmatching buffer sizes: {lhs} != {rhs}")
        self.lhs = int(lhs)
        self.rhs = int(rhs)


class UnmatchingMatrixShapes(MentorNetsError):
    def __init__(self, expected: tuple[int, ...], actual: tuple[int, ...]) -> None:
        super().__init__(f"unmatching matrix shapes: expected {expected}, got {actual}")
        self.expected = tuple(expected)
        self.actual = tuple(actual)


class ImmutableBuffer(MentorNetsError):
    def __init__(self) -> None:
        super().__init__("attempted to mutate a read-only buffer view")


class ConfigurationError(MentorNetsError, ValueError):
    """Invalid topology, sample set or mentor configuration."""


__all__ = [
    "MentorNetsError",
    "ZeroSizedBuffer",
    "TooFewValues",
    "UnmatchingBiasValue",
    "UnmatchingBufferSizes",
    "UnmatchingMatrixShapes",
    "ImmutableBuffer",
    "ConfigurationError",
]
