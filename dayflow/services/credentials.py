"""
Employee credential helpers.

Login ID format: {CompanyCode}{FirstTwo}{LastTwo}{Year}{Serial}
Example: ACJODO20240007
- AC   -> first 2 letters of the company name
- JO   -> first 2 letters of the first name
- DO   -> first 2 letters of the last name
- 2024 -> year of joining
- 0007 -> joining serial within that company and year
"""
import re
import secrets
import string
from typing import Optional, TypedDict

from sqlalchemy import select
from sqlalchemy.orm import Session

from dayflow.database import upsert
from dayflow.models.company import EmployeeSerialCounter

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*"

LOGIN_ID_PATTERN = re.compile(r"^[A-Z]{6}\d{8}$")

_NON_LETTERS = re.compile(r"[^a-zA-Z]")


class LoginIdParts(TypedDict):
    company_code: str
    first_name_code: str
    last_name_code: str
    year: int
    serial: int


def generate_password(length: int = 12) -> str:
    """
    Temporary password with at least one character from each class.
    A usability feature for first login, not a security boundary.
    """
    if length < 4:
        raise ValueError("Password length must be at least 4")
    all_chars = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

    chars = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(all_chars) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def name_code(value: str, width: int = 2) -> str:
    """Leading letters of a name, uppercased; shorter when the name has fewer letters."""
    return _NON_LETTERS.sub("", value or "")[:width].upper()


def generate_login_id(
    company_name: str,
    first_name: str,
    last_name: str,
    joining_year: int,
    serial_number: int,
) -> str:
    return (
        f"{name_code(company_name)}"
        f"{name_code(first_name)}"
        f"{name_code(last_name)}"
        f"{joining_year}"
        f"{serial_number:04d}"
    )


def is_valid_login_id(login_id: str) -> bool:
    return bool(login_id) and LOGIN_ID_PATTERN.match(login_id) is not None


def parse_login_id(login_id: str) -> Optional[LoginIdParts]:
    if not is_valid_login_id(login_id):
        return None
    return {
        "company_code": login_id[0:2],
        "first_name_code": login_id[2:4],
        "last_name_code": login_id[4:6],
        "year": int(login_id[6:10]),
        "serial": int(login_id[10:14]),
    }


def next_serial_number(db: Session, company_id: int, year: int) -> int:
    """
    Reserve the next joining serial for a company/year.
    Single INSERT .. ON CONFLICT DO UPDATE so concurrent callers never share a serial.
    Does not commit; the caller's unit of work owns the transaction.
    """
    stmt = upsert(db, EmployeeSerialCounter).values(company_id=company_id, year=year, last_serial=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["company_id", "year"],
        set_={"last_serial": EmployeeSerialCounter.last_serial + 1},
    )
    db.execute(stmt)
    return db.execute(
        select(EmployeeSerialCounter.last_serial).where(
            EmployeeSerialCounter.company_id == company_id,
            EmployeeSerialCounter.year == year,
        )
    ).scalar_one()
