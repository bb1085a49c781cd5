"""
Internship Placement Portal
A role-based internship placement system backed by CSV files.

Architecture:
- CSV files: one per entity type, the durable snapshot
- In-memory repositories: the source of truth for reads, one RW lock each
- Services: business rules and multi-entity workflows
"""

__version__ = "1.0.0"
