"""Short code generation utilities."""

import itertools
import random
import string
import threading
from typing import Optional


class ShortCodeGenerator:
    """Generate candidate short codes.

    The generator never looks at the store, so a candidate may already be
    taken; the allocator is responsible for retrying.
    """

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    STRATEGIES = ("random", "sequential")

    def __init__(
        self,
        default_length: int = 6,
        strategy: str = "random",
        sequence_start: Optional[int] = None,
    ):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
            strategy: "random" or "sequential"
            sequence_start: First counter value for the sequential strategy
                (a random offset is picked when omitted)
        """
        if strategy not in self.STRATEGIES:
            raise ValueError(
                f"Unknown code strategy '{strategy}' (expected one of {', '.join(self.STRATEGIES)})"
            )
        if default_length < 1:
            raise ValueError("default_length must be at least 1")

        self.default_length = default_length
        self.strategy = strategy
        self._random = random.SystemRandom()

        if sequence_start is None:
            # Start somewhere inside the code space so separate processes
            # rarely walk the same sequence.
            sequence_start = self._random.randrange(len(self.BASE62_CHARS) ** default_length // 2)
        self._counter = itertools.count(sequence_start)
        self._counter_lock = threading.Lock()

    def generate(self) -> str:
        """Produce the next candidate code using the configured strategy."""
        if self.strategy == "sequential":
            with self._counter_lock:
                number = next(self._counter)
            return self.generate_sequential(number)
        return self.generate_random()

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(self._random.choices(self.BASE62_CHARS, k=length))

    def generate_sequential(self, sequence_number: int, length: Optional[int] = None) -> str:
        """Generate short code from sequence number.

        Args:
            sequence_number: Sequential ID
            length: Minimum length of the code (uses default if not specified)

        Returns:
            Short code based on sequence number, left-padded with the
            zero digit of the alphabet
        """
        length = length or self.default_length
        code = self._int_to_base62(sequence_number)
        if len(code) < length:
            code = code.rjust(length, self.BASE62_CHARS[0])
        return code

    def _int_to_base62(self, num: int) -> str:
        """Convert a non-negative integer to a base62 string."""
        if num < 0:
            raise ValueError("Cannot encode negative numbers")
        if num == 0:
            return self.BASE62_CHARS[0]

        result = []
        base = len(self.BASE62_CHARS)

        while num > 0:
            num, remainder = divmod(num, base)
            result.append(self.BASE62_CHARS[remainder])

        return ''.join(reversed(result))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check that code is non-empty and only uses URL-path-safe characters."""
        return bool(code) and all(c in ShortCodeGenerator.BASE62_CHARS or c in '-_' for c in code)
