"""
Tracking ID generation.

IDs look like TRK4F7Q2ZK9A: a fixed prefix followed by random
uppercase alphanumerics drawn from a CSPRNG.
"""

import secrets
import string

from parcel_tracker.app.core.config import settings

ALPHABET = string.ascii_uppercase + string.digits


def generate_tracking_id(prefix: str = None, length: int = None) -> str:
    prefix = settings.tracking_id_prefix if prefix is None else prefix
    length = settings.tracking_id_length if length is None else length
    return prefix + "".join(secrets.choice(ALPHABET) for _ in range(length))
