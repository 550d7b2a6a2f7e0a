"""Personal Health Number (PHN) allocation.

This module generates a candidate PHN for registrations where the operator
does not supply an existing one.
"""

import logging
import random
from typing import Optional

logger = logging.getLogger(__name__)

# PHNs are exactly this many ASCII digits
PHN_LENGTH = 10


def generate_phn(rng: Optional[random.Random] = None) -> str:
    """Generate a 10-digit PHN.

    Each digit is drawn independently and uniformly from 0-9, so leading zeros
    are possible. No uniqueness check is made against the registry: a
    collision surfaces only as a registry-side rejection of the create call.

    Args:
        rng: Random source, e.g. random.Random(seed) for reproducible output.
             Defaults to the module-level random generator.

    Returns:
        PHN string of exactly 10 digits

    Example:
        >>> len(generate_phn(random.Random(42)))
        10
    """
    source = rng if rng is not None else random
    phn = "".join(str(source.randrange(10)) for _ in range(PHN_LENGTH))
    logger.debug("Generated candidate PHN")
    return phn


def is_valid_phn(value: str) -> bool:
    """Check that value has the PHN shape: exactly 10 ASCII digits."""
    return len(value) == PHN_LENGTH and value.isascii() and value.isdigit()
