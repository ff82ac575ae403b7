import string

import pytest

from dayflow.services.credentials import (
    SYMBOLS,
    generate_login_id,
    generate_password,
    is_valid_login_id,
    name_code,
    next_serial_number,
    parse_login_id,
)


def test_generate_login_id_canonical_format():
    """Company, first and last name codes, joining year and zero-padded serial."""
    assert generate_login_id("Acme Corp", "John", "Doe", 2024, 7) == "ACJODO20240007"
    assert generate_login_id("Acme Inc", "Jo", "Do", 2024, 7) == "ACJODO20240007"


def test_generate_login_id_short_names_are_not_padded():
    login_id = generate_login_id("Acme", "J", "Do", 2024, 1)
    assert login_id == "ACJDO20240001"
    assert not is_valid_login_id(login_id)


def test_name_code_ignores_non_letters():
    assert name_code("3M Company") == "MC"
    assert name_code("o'neil") == "ON"
    assert name_code("") == ""


def test_parse_login_id():
    parts = parse_login_id("ACJODO20240007")
    assert parts == {
        "company_code": "AC",
        "first_name_code": "JO",
        "last_name_code": "DO",
        "year": 2024,
        "serial": 7,
    }


@pytest.mark.parametrize("value", ["", "ACJODO2024007", "acjodo20240007", "ACJOD120240007"])
def test_parse_login_id_rejects_malformed(value):
    assert parse_login_id(value) is None
    assert not is_valid_login_id(value)


def test_generate_password_contains_every_class():
    for _ in range(20):
        password = generate_password()
        assert len(password) == 12
        assert any(c in string.ascii_uppercase for c in password)
        assert any(c in string.ascii_lowercase for c in password)
        assert any(c in string.digits for c in password)
        assert any(c in SYMBOLS for c in password)


def test_generate_password_custom_length():
    assert len(generate_password(20)) == 20
    with pytest.raises(ValueError):
        generate_password(3)


def test_next_serial_number_is_per_company_and_year(db_session, company, other_company):
    assert next_serial_number(db_session, company.id, 2024) == 1
    assert next_serial_number(db_session, company.id, 2024) == 2
    assert next_serial_number(db_session, company.id, 2025) == 1
    assert next_serial_number(db_session, other_company.id, 2024) == 1
    db_session.commit()
    assert next_serial_number(db_session, company.id, 2024) == 3
