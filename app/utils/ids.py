"""ID generation for entities created at runtime."""

import uuid
from datetime import datetime

APPLICATION_PREFIX = "APP"
INTERNSHIP_PREFIX = "INT"
WITHDRAWAL_PREFIX = "WDR"


def generate_id(prefix: str) -> str:
    """PREFIX-yyyyMMdd-HHmmss-xxxxxxxx (8 hex chars of a uuid4)."""
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return f"{prefix}-{timestamp}-{uuid.uuid4().hex[:8]}"


def generate_application_id() -> str:
    return generate_id(APPLICATION_PREFIX)


def generate_internship_id() -> str:
    return generate_id(INTERNSHIP_PREFIX)


def generate_withdrawal_id() -> str:
    return generate_id(WITHDRAWAL_PREFIX)
