"""
Error taxonomy for the placement core.

Every failure the services surface is one of these. The HTTP layer maps
them to status codes in app/main.py; nothing in here knows about HTTP.
"""

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class BusinessRule(str, Enum):
    """Identifies which business rule rejected an action."""
    MAX_ACTIVE_APPLICATIONS = "max-active-applications"
    DUPLICATE_APPLICATION = "duplicate-application"
    PLACEMENT_ALREADY_ACCEPTED = "placement-already-accepted"
    INELIGIBLE_LEVEL = "ineligible-level"
    INELIGIBLE_MAJOR = "ineligible-major"
    INTERNSHIP_NOT_OPEN = "internship-not-open"
    MAX_INTERNSHIPS = "max-internships"
    INVALID_SLOTS = "invalid-slots"
    INVALID_DATE_ORDER = "invalid-date-order"
    NO_SLOTS = "no-slots"
    NOT_EDITABLE = "not-editable"
    NOT_DELETABLE = "not-deletable"
    ALREADY_PROCESSED = "already-processed"
    INVALID_STATUS_TRANSITION = "invalid-status-transition"
    WITHDRAWAL_PENDING = "withdrawal-pending"
    NOT_WITHDRAWABLE = "not-withdrawable"
    DUPLICATE_ACCOUNT = "duplicate-account"


class PlacementError(Exception):
    """Base class for all errors raised by the placement core."""


class ResourceNotFoundError(PlacementError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class InvalidInputError(PlacementError):
    """Malformed or missing required field."""


class UnauthorizedError(PlacementError):
    """Bad credentials, wrong role, or acting on someone else's record."""


class BusinessRuleError(PlacementError):
    def __init__(self, rule: BusinessRule, message: str):
        self.rule = rule
        super().__init__(message)


class PersistenceError(PlacementError):
    """
    A CSV rewrite failed. The in-memory cache for `entity` was NOT updated,
    so memory and file still agree.
    """

    def __init__(self, entity: str, path: Optional[Path], message: str):
        self.entity = entity
        self.path = path
        super().__init__(message)


class PartialPersistenceError(PersistenceError):
    """
    A multi-entity workflow wrote some entity types and then failed.
    `persisted` were durably updated (cache and file), `failed` were not.
    """

    def __init__(self, persisted: Sequence[str], failed: Sequence[str], cause: PersistenceError):
        self.persisted = list(persisted)
        self.failed = list(failed)
        super().__init__(
            cause.entity,
            cause.path,
            f"Partial update: persisted {self.persisted}, not persisted {self.failed} ({cause})",
        )
