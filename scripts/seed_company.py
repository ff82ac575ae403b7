"""
Bootstrap a company, its first admin and the admin's leave allocations.

    python scripts/seed_company.py "Acme Corp" Jane Doe jane@acme.com
"""
import sys

from dayflow.database import SessionLocal, init_db
from dayflow.models.company import Company
from dayflow.schemas.profile import CompanyRegistration
from dayflow.services.employee_service import register_company


def seed(company_name: str, first_name: str, last_name: str, email: str):
    init_db()
    db = SessionLocal()
    try:
        existing = db.query(Company).filter(Company.name == company_name).first()
        if existing:
            print(f"Company {company_name} already exists (id={existing.id})")
            return

        company, admin = register_company(db, CompanyRegistration(
            company_name=company_name,
            admin_first_name=first_name,
            admin_last_name=last_name,
            email=email,
        ))
        print(f"Created company {company.name} [{company.code}]")
        print(f"Admin login ID: {admin.employee_id}  profile id: {admin.id}")
        for allocation in admin.leave_allocations:
            print(f"  {allocation.leave_type} {allocation.year}: {allocation.total_days} day(s)")
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) != 5:
        print(__doc__)
        sys.exit(1)
    seed(*sys.argv[1:])
