from datetime import date

import pytest

from dayflow.core.exceptions import AccessDeniedError, InputValidationError, NotFoundError
from dayflow.core.security import decrypt_data, verify_password
from dayflow.models.profile import AttendanceStatus, EmployeeStatus, Profile, UserRole
from dayflow.schemas.profile import CompanyRegistration, EmployeeCreate, EmployeeUpdate
from dayflow.schemas.salary import SalaryInfoUpdate
from dayflow.services import notification
from dayflow.services.employee_service import EmployeeService, register_company
from dayflow.services.notification import EmailService


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outbound e-mail instead of calling the provider."""
    sent = []

    def fake_post(payload):
        sent.append(payload)
        return {"id": "email-123"}

    monkeypatch.setattr(notification.settings.email, "resend_api_key", "re_test")
    monkeypatch.setattr(EmailService, "_post", staticmethod(fake_post))
    return sent


def _new_hire(**overrides):
    data = {
        "first_name": "John",
        "last_name": "Smith",
        "email": "john.smith@acme.com",
        "joining_date": date(2024, 3, 1),
        "designation": "Engineer",
    }
    data.update(overrides)
    return EmployeeCreate(**data)


def test_register_company_bootstraps_admin(db_session):
    company, admin = register_company(db_session, CompanyRegistration(
        company_name="Acme Corp",
        admin_first_name="Jane",
        admin_last_name="Doe",
        email="jane@acme.com",
    ))

    assert company.code == "AC"
    assert admin.role == UserRole.ADMIN.value
    assert admin.employee_id == "ACJADO20240001"
    assert admin.is_first_login is False
    assert sorted(a.leave_type for a in admin.leave_allocations) == ["casual_leave", "paid_leave", "sick_leave"]


def test_create_employee_issues_credentials(db_session, admin, ctx_for, sent_emails):
    result = EmployeeService(db_session, ctx_for(admin)).create_employee(_new_hire())

    profile = result["profile"]
    assert result["login_id"] == "ACJOSM20240001"
    assert profile.employee_id == result["login_id"]
    assert profile.is_first_login is True
    assert profile.attendance_status == AttendanceStatus.ABSENT.value
    assert profile.role == UserRole.EMPLOYEE.value
    assert verify_password(result["temporary_password"], profile.password_hash)
    assert result["email_sent"] is True
    assert sent_emails[0]["to"] == ["john.smith@acme.com"]
    assert result["login_id"] in sent_emails[0]["html"]


def test_create_employee_grants_default_allocations(db_session, admin, ctx_for):
    service = EmployeeService(db_session, ctx_for(admin))
    profile = service.create_employee(_new_hire())["profile"]
    last_year_hire = service.create_employee(
        _new_hire(first_name="Kate", last_name="Lee", email="kate@acme.com", joining_date=date(2023, 11, 1))
    )["profile"]

    granted = {(a.leave_type, a.year): a.total_days for a in profile.leave_allocations}
    assert granted == {("paid_leave", 2024): 20, ("sick_leave", 2024): 12, ("casual_leave", 2024): 10}
    assert all(a.used_days == 0 for a in profile.leave_allocations)
    assert {a.year for a in last_year_hire.leave_allocations} == {2023, 2024}
    assert len(last_year_hire.leave_allocations) == 6


def test_create_employee_serial_increments(db_session, admin, ctx_for, sent_emails):
    service = EmployeeService(db_session, ctx_for(admin))
    service.create_employee(_new_hire())
    second = service.create_employee(_new_hire(first_name="Kate", last_name="Lee", email="kate@acme.com"))
    assert second["login_id"] == "ACKALE20240002"


def test_create_employee_survives_email_failure(db_session, admin, ctx_for):
    # No API key configured in tests
    result = EmployeeService(db_session, ctx_for(admin)).create_employee(_new_hire())
    assert result["email_sent"] is False
    assert db_session.query(Profile).filter(Profile.email == "john.smith@acme.com").count() == 1


def test_create_employee_accepts_legacy_hr_role(db_session, admin, ctx_for):
    result = EmployeeService(db_session, ctx_for(admin)).create_employee(_new_hire(role="hr"))
    assert result["profile"].role == UserRole.ADMIN.value


def test_create_employee_requires_admin(db_session, employee, ctx_for):
    with pytest.raises(AccessDeniedError):
        EmployeeService(db_session, ctx_for(employee)).create_employee(_new_hire())


def test_create_employee_rejects_duplicate_email(db_session, admin, employee, ctx_for):
    with pytest.raises(InputValidationError):
        EmployeeService(db_session, ctx_for(admin)).create_employee(_new_hire(email=employee.email))


def test_directory_is_company_scoped(db_session, admin, employee, colleague, outsider, ctx_for):
    service = EmployeeService(db_session, ctx_for(employee))

    assert [p.first_name for p in service.list_employees()] == ["Alice", "John", "Mary"]
    assert service.get_employee(colleague.id).id == colleague.id
    with pytest.raises(NotFoundError):
        service.get_employee(outsider.id)


def test_update_employee(db_session, admin, employee, ctx_for):
    updated = EmployeeService(db_session, ctx_for(admin)).update_employee(
        employee.id, EmployeeUpdate(designation="Lead", department="R&D", role="hr")
    )
    assert updated.designation == "Lead"
    assert updated.role == UserRole.ADMIN.value


def test_update_employee_status(db_session, admin, employee, ctx_for):
    updated = EmployeeService(db_session, ctx_for(admin)).update_employee(
        employee.id, EmployeeUpdate(status="On Leave")
    )
    assert updated.status == EmployeeStatus.ON_LEAVE.value


def test_admin_cannot_update_other_company(db_session, other_admin, employee, ctx_for):
    with pytest.raises(NotFoundError):
        EmployeeService(db_session, ctx_for(other_admin)).update_employee(employee.id, EmployeeUpdate(designation="X"))


def test_reset_password(db_session, admin, employee, ctx_for):
    service = EmployeeService(db_session, ctx_for(admin))
    with pytest.raises(InputValidationError):
        service.reset_password(employee.id, "short")

    profile = service.reset_password(employee.id, "longenough1")
    assert verify_password("longenough1", profile.password_hash)
    assert profile.is_first_login is True


def test_update_own_field(db_session, employee, ctx_for):
    service = EmployeeService(db_session, ctx_for(employee))

    profile = service.update_own_field("phone", "+1 555 0100")
    assert profile.phone == "+1 555 0100"

    profile = service.update_own_field("date_of_birth", "1990-05-15")
    assert profile.date_of_birth == date(1990, 5, 15)

    profile = service.update_own_field("account_number", "123456789")
    assert profile.account_number != "123456789"
    assert decrypt_data(profile.account_number) == "123456789"


def test_update_own_field_rejects_protected_fields(db_session, employee, ctx_for):
    service = EmployeeService(db_session, ctx_for(employee))
    for field in ("role", "company_id", "employee_id", "attendance_status"):
        with pytest.raises(InputValidationError):
            service.update_own_field(field, "admin")


def test_skills(db_session, employee, ctx_for):
    service = EmployeeService(db_session, ctx_for(employee))
    service.add_skill("Python")
    service.add_skill("SQL")
    profile = service.add_skill("Python")
    assert profile.skills == ["Python", "SQL"]

    profile = service.remove_skill("Python")
    assert profile.skills == ["SQL"]


def test_salary_info(db_session, admin, employee, ctx_for):
    admin_service = EmployeeService(db_session, ctx_for(admin))
    assert admin_service.get_salary_info(employee.id) is None

    salary = admin_service.upsert_salary_info(employee.id, SalaryInfoUpdate(monthly_wage=5000, yearly_wage=60000))
    assert salary.monthly_wage == 5000

    salary = admin_service.upsert_salary_info(employee.id, SalaryInfoUpdate(hra=1200))
    assert salary.monthly_wage == 5000
    assert salary.hra == 1200


def test_salary_info_is_privileged(db_session, employee, colleague, ctx_for):
    service = EmployeeService(db_session, ctx_for(employee))
    with pytest.raises(AccessDeniedError):
        service.get_salary_info(colleague.id)
    with pytest.raises(AccessDeniedError):
        service.upsert_salary_info(colleague.id, SalaryInfoUpdate(monthly_wage=1))
