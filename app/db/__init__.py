"""
Database module - CSV-backed entity caches.
"""
from app.db.locks import ReadWriteLock
from app.db.repository import CsvRepository
from app.db.repositories import (
    ApplicationRepository,
    InternshipRepository,
    RepresentativeRepository,
    StaffRepository,
    StudentRepository,
    WithdrawalRepository,
)

__all__ = [
    "ReadWriteLock",
    "CsvRepository",
    "ApplicationRepository",
    "InternshipRepository",
    "RepresentativeRepository",
    "StaffRepository",
    "StudentRepository",
    "WithdrawalRepository",
]
