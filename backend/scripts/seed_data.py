"""
Seed Data Script - Creates the form catalogue and sample approvers for testing
Run: python -m scripts.seed_data
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from formportal.repositories.mongo_client import create_indexes
from formportal.repositories.form_type_repo import FormTypeRepository
from formportal.repositories.staff_repo import StaffRepository
from formportal.domain.models import FormType, StaffMember


FORM_TYPES = [
    FormType(
        form_type_id="withdrawal",
        name="Withdrawal Form",
        description="Withdraw from a course before the census date",
        due_date="Rolling",
        requires_lecturer_approval=True,
        requires_registrar_approval=True,
    ),
    FormType(
        form_type_id="late-withdrawal",
        name="Late Withdrawal Form",
        description="Withdraw from a course after the census date",
        due_date="Rolling",
        requires_lecturer_approval=True,
        requires_dean_approval=True,
        requires_registrar_approval=True,
        requires_accounts_receivable_approval=True,
    ),
    FormType(
        form_type_id="deferred-exam",
        name="Deferred Exam Application",
        description="Sit a final examination at a later date",
        due_date="Within 5 days of the exam",
        requires_lecturer_approval=True,
        requires_dean_approval=True,
        requires_registrar_approval=True,
    ),
    FormType(
        form_type_id="program-change",
        name="Program Change Form",
        description="Transfer to a different program of study",
        due_date="Rolling",
        requires_dean_approval=True,
        requires_registrar_approval=True,
    ),
    FormType(
        form_type_id="transcript-request",
        name="Transcript Request Form",
        description="Request an official academic transcript",
        due_date="Rolling",
        requires_registrar_approval=True,
        requires_accounts_receivable_approval=True,
    ),
]

STAFF = [
    StaffMember(staff_id="STF-1001", first_name="Grace", last_name="Hopper",
                role="Senior Lecturer", department="Computer Science"),
    StaffMember(staff_id="STF-1002", first_name="Alan", last_name="Turing",
                role="Lecturer", department="Mathematics"),
    StaffMember(staff_id="STF-2001", first_name="Ada", last_name="Lovelace",
                role="Dean of Science", department="Computer Science"),
    StaffMember(staff_id="STF-3001", first_name="Edsger", last_name="Dijkstra",
                role="Registrar"),
    StaffMember(staff_id="STF-4001", first_name="Barbara", last_name="Liskov",
                role="accounts_receivable"),
]


def seed_form_types():
    repo = FormTypeRepository()
    for form_type in FORM_TYPES:
        repo.upsert_form_type(form_type)
        print(f"Form type: {form_type.name} -> {[t.value for t in form_type.required_approval_types()]}")


def seed_staff():
    repo = StaffRepository()
    for member in STAFF:
        repo.upsert_staff(member)
        print(f"Staff: {member.display_name} ({member.role})")


def main():
    print("=== Seeding database ===")
    print("-" * 40)

    create_indexes()
    seed_form_types()
    seed_staff()

    print("-" * 40)
    print("Done!")


if __name__ == "__main__":
    main()
