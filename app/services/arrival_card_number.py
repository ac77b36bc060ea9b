"""
Arrival Card Number Allocation

Arrival card numbers are short (5 digits by default), so collisions with
already issued cards are expected. Every candidate is checked against the
entry_form table before it is used; the UNIQUE constraint on
entry_form.arrival_card_no remains the final guard against concurrent issuers.
"""

import logging
import random
from typing import Callable, Optional, TypeVar

from app.core.errors import AllocationExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_DIGITS = 5
DEFAULT_MAX_ATTEMPTS = 10


class RetryExhaustedError(Exception):
    """Raised by retry_until when no candidate was accepted"""

    def __init__(self, attempts: int):
        super().__init__(f"No acceptable candidate after {attempts} attempts")
        self.attempts = attempts


def retry_until(generate: Callable[[], T], accept: Callable[[T], bool], max_attempts: int) -> T:
    """
    Draw candidates until one is accepted

    Exceptions raised by ``accept`` propagate immediately and end the loop.

    Raises:
        RetryExhaustedError: after ``max_attempts`` rejected candidates
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        candidate = generate()
        if accept(candidate):
            logger.debug(f"Candidate accepted on attempt {attempt}")
            return candidate
        logger.debug(f"Candidate rejected on attempt {attempt}/{max_attempts}")

    raise RetryExhaustedError(max_attempts)


class ArrivalCardNumberAllocator:
    """
    Allocates arrival card numbers that are not yet used by any entry form

    Args:
        is_taken: returns True if an entry form already uses the number,
            False if the lookup found nothing; any other lookup failure must
            raise (PersistenceError) and aborts the allocation
        digits: fixed width of the number
        max_attempts: candidates drawn before giving up
        rng: random source, injectable for tests
    """

    def __init__(
        self,
        is_taken: Callable[[str], bool],
        digits: int = DEFAULT_DIGITS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None
    ):
        if digits < 1:
            raise ValueError("digits must be at least 1")
        self.is_taken = is_taken
        self.digits = digits
        self.max_attempts = max_attempts
        self.rng = rng or random.SystemRandom()
        self.low = 10 ** (digits - 1)
        self.high = 10 ** digits - 1

    def generate_candidate(self) -> str:
        """Uniform draw from the fixed-width range (no leading zeros)"""
        return str(self.rng.randint(self.low, self.high))

    def allocate(self) -> str:
        """Return a free arrival card number"""
        try:
            number = retry_until(
                self.generate_candidate,
                lambda candidate: not self.is_taken(candidate),
                self.max_attempts
            )
        except RetryExhaustedError as e:
            logger.error(f"Arrival card number allocation exhausted after {e.attempts} attempts")
            raise AllocationExhaustedError(
                f"Failed to generate a unique arrival card number after {e.attempts} attempts"
            )

        logger.info(f"Allocated arrival card number {number}")
        return number
