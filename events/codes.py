"""
Reservation code generator.

Codes look like ``RES-7K2Q9XJD``: a prefix and eight symbols drawn from
A-Z0-9 with a cryptographic RNG.  Each candidate is checked against the
registration table before it is handed out; the unique index on
``reservation_code`` still has the final word at insert time.
"""
import logging
import secrets
import string

from django.conf import settings

from .exceptions import CodeGenerationExhausted
from .models import EventRegistration

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_uppercase + string.digits


def code_taken(code: str) -> bool:
    return EventRegistration.objects.filter(reservation_code=code).exists()


class ReservationCodeGenerator:
    def __init__(
        self,
        prefix=None,
        length=None,
        fallback_length=None,
        max_attempts=None,
        exists=code_taken,
        rng=None,
    ):
        self.prefix = prefix or settings.RESERVATION_CODE_PREFIX
        self.length = length or settings.RESERVATION_CODE_LENGTH
        self.fallback_length = fallback_length or settings.RESERVATION_CODE_FALLBACK_LENGTH
        self.max_attempts = max_attempts or settings.RESERVATION_CODE_MAX_ATTEMPTS
        self._exists = exists
        self._rng = rng or secrets.SystemRandom()

    def candidate(self, length: int) -> str:
        body = "".join(self._rng.choice(ALPHABET) for _ in range(length))
        return f"{self.prefix}-{body}"

    def generate(self) -> str:
        """
        Return a code that is not in use right now.

        Tries `max_attempts` codes of the normal length, then the same number
        of longer codes, then gives up with `CodeGenerationExhausted`.
        """
        for length in (self.length, self.fallback_length):
            for _ in range(self.max_attempts):
                code = self.candidate(length)
                if not self._exists(code):
                    return code
                logger.warning("Reservation code collision on %s", code)
        logger.error("Reservation code space exhausted after %d attempts", 2 * self.max_attempts)
        raise CodeGenerationExhausted()
