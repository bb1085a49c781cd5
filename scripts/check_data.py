#!/usr/bin/env python3
"""
Data Check Script

Loads every CSV file the way the server does and reports entity counts
plus any records that break the placement invariants.
Usage: python scripts/check_data.py
"""
import sys
sys.path.insert(0, '.')

from collections import Counter

from app.core.config import get_settings
from app.models.entities import MAX_ACTIVE_APPLICATIONS, InternshipStatus
from app.services.container import build_container


def find_violations(repositories) -> list:
    """Return a human-readable line per broken invariant."""
    problems = []

    active = Counter(a.student_id for a in repositories.applications.find_all() if a.is_active)
    for student_id, count in active.items():
        if count > MAX_ACTIVE_APPLICATIONS:
            problems.append(f"student {student_id}: {count} active applications")

    for internship in repositories.internships.find_all():
        if internship.filled_slots > internship.total_slots:
            problems.append(
                f"internship {internship.internship_id}: "
                f"{internship.filled_slots}/{internship.total_slots} slots filled"
            )
        at_capacity = internship.filled_slots == internship.total_slots
        if at_capacity != (internship.status == InternshipStatus.FILLED):
            problems.append(
                f"internship {internship.internship_id}: status {internship.status.value} "
                f"with {internship.filled_slots}/{internship.total_slots} filled"
            )

    pending = Counter(w.application_id for w in repositories.withdrawals.find_pending())
    for application_id, count in pending.items():
        if count > 1:
            problems.append(f"application {application_id}: {count} pending withdrawal requests")

    return problems


def main():
    settings = get_settings()
    print("=" * 50)
    print("INTERNSHIP PLACEMENT PORTAL - DATA CHECK")
    print("=" * 50)
    print(f"\nData directory: {settings.data_dir}")

    services = build_container(settings)

    print("\n[1] Entity counts")
    for repository in services.repositories.all():
        print(f"    {repository.entity_name:<16} {repository.count():>5}  ({repository.csv_path})")

    print("\n[2] Invariants")
    problems = find_violations(services.repositories)
    if problems:
        for line in problems:
            print(f"    ❌ {line}")
    else:
        print("    ✅ No violations found")

    print("\n" + "=" * 50)
    print("Data check complete!")
    print("=" * 50)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
