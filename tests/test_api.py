from datetime import date

from dayflow.models.attendance import AttendanceRecord
from dayflow.models.leave_request import LeaveType
from dayflow.models.profile import AttendanceStatus


def _file_leave(client, headers, leave_type="paid_leave", start="2024-06-10", end="2024-06-12"):
    return client.post(
        "/api/leave/requests",
        headers=headers,
        json={"leave_type": leave_type, "start_date": start, "end_date": end, "reason": "Family trip"},
    )


def test_missing_identity_is_unauthenticated(client):
    response = client.get("/api/leave/requests")
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "UNAUTHENTICATED"


def test_unknown_identity_is_unauthenticated(client):
    response = client.get("/api/leave/requests", headers={"X-User-ID": "nobody"})
    assert response.status_code == 401


def test_leave_lifecycle_over_http(client, db_session, admin, employee, allocate, auth_headers):
    allocate(employee, LeaveType.PAID, 20)

    response = _file_leave(client, auth_headers(employee))
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    request_id = body["data"]["id"]
    assert body["data"]["days_count"] == 3

    queue = client.get("/api/leave/admin/requests?status=pending", headers=auth_headers(admin))
    assert queue.status_code == 200
    rows = queue.json()["data"]
    assert [r["id"] for r in rows] == [request_id]
    assert rows[0]["first_name"] == "John"

    approved = client.post(f"/api/leave/admin/requests/{request_id}/approve", headers=auth_headers(admin))
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "approved"

    again = client.post(f"/api/leave/admin/requests/{request_id}/approve", headers=auth_headers(admin))
    assert again.status_code == 409
    assert again.json()["errors"][0]["code"] == "INVALID_STATE"

    available = client.get("/api/leave/available/paid_leave", headers=auth_headers(employee))
    assert available.json()["data"]["available_days"] == 17

    assert db_session.query(AttendanceRecord).filter(
        AttendanceRecord.profile_id == employee.id,
        AttendanceRecord.status == AttendanceStatus.ON_LEAVE.value,
    ).count() == 3


def test_insufficient_balance_over_http(client, employee, allocate, auth_headers):
    allocate(employee, LeaveType.CASUAL, 5, used_days=4)
    response = _file_leave(client, auth_headers(employee), "casual_leave", "2024-06-10", "2024-06-11")
    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "INSUFFICIENT_BALANCE"


def test_invalid_leave_type_over_http(client, employee, auth_headers):
    response = _file_leave(client, auth_headers(employee), "vacation")
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_employee_cannot_reach_admin_queue(client, employee, auth_headers):
    response = client.get("/api/leave/admin/requests", headers=auth_headers(employee))
    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "PERMISSION_DENIED"


def test_cross_tenant_reject_over_http(client, employee, other_admin, auth_headers):
    request_id = _file_leave(client, auth_headers(employee), "unpaid_leave").json()["data"]["id"]
    response = client.post(
        f"/api/leave/admin/requests/{request_id}/reject",
        headers=auth_headers(other_admin),
        json={"reason": "No"},
    )
    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "CROSS_TENANT"


def test_cancel_over_http(client, employee, auth_headers):
    request_id = _file_leave(client, auth_headers(employee), "unpaid_leave").json()["data"]["id"]
    response = client.post(f"/api/leave/requests/{request_id}/cancel", headers=auth_headers(employee))
    assert response.json()["data"]["status"] == "cancelled"

    mine = client.get("/api/leave/requests", headers=auth_headers(employee)).json()
    assert mine["metadata"]["count"] == 1


def test_attendance_over_http(client, admin, employee, auth_headers):
    out_first = client.post("/api/attendance/check-out", headers=auth_headers(employee))
    assert out_first.status_code == 409
    assert out_first.json()["errors"][0]["code"] == "NO_CHECK_IN"

    checked_in = client.post("/api/attendance/check-in", headers=auth_headers(employee))
    assert checked_in.status_code == 200
    assert checked_in.json()["data"]["status"] == "present"

    checked_out = client.post("/api/attendance/check-out", headers=auth_headers(employee))
    assert checked_out.json()["data"]["check_out_time"] is not None

    today = client.get("/api/attendance/today", headers=auth_headers(employee)).json()["data"]
    assert today["on_leave"] is False
    assert today["attendance"]["id"] == checked_in.json()["data"]["id"]

    company_day = client.get(f"/api/attendance/company/date/{date(2024, 6, 11)}", headers=auth_headers(admin))
    rows = company_day.json()["data"]
    assert [r["first_name"] for r in rows] == ["John"]


def test_check_in_on_leave_over_http(client, admin, employee, auth_headers):
    request_id = _file_leave(client, auth_headers(employee), "unpaid_leave").json()["data"]["id"]
    client.post(f"/api/leave/admin/requests/{request_id}/approve", headers=auth_headers(admin))

    response = client.post("/api/attendance/check-in", headers=auth_headers(employee))
    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "ON_APPROVED_LEAVE"


def test_employee_directory_hides_private_fields(client, admin, employee, colleague, auth_headers):
    client.patch(
        "/api/profile/me",
        headers=auth_headers(colleague),
        json={"field": "pan_id", "value": "ABCDE1234F"},
    )

    as_peer = client.get(f"/api/employees/{colleague.id}", headers=auth_headers(employee)).json()["data"]
    assert "pan_id" not in as_peer

    as_admin = client.get(f"/api/employees/{colleague.id}", headers=auth_headers(admin)).json()["data"]
    assert as_admin["pan_id"] == "ABCDE1234F"

    as_self = client.get("/api/profile/me", headers=auth_headers(colleague)).json()["data"]
    assert as_self["pan_id"] == "ABCDE1234F"


def test_create_employee_over_http(client, admin, employee, auth_headers):
    payload = {
        "first_name": "Kate",
        "last_name": "Lee",
        "email": "kate.lee@acme.com",
        "joining_date": "2024-02-01",
    }
    forbidden = client.post("/api/employees", headers=auth_headers(employee), json=payload)
    assert forbidden.status_code == 403

    created = client.post("/api/employees", headers=auth_headers(admin), json=payload)
    assert created.status_code == 201
    data = created.json()["data"]
    assert data["login_id"] == "ACKALE20240001"
    assert len(data["temporary_password"]) == 12
    assert data["profile"]["is_first_login"] is True


def test_salary_over_http(client, admin, employee, auth_headers):
    denied = client.get(f"/api/employees/{employee.id}/salary", headers=auth_headers(employee))
    assert denied.status_code == 403

    saved = client.put(
        f"/api/employees/{employee.id}/salary",
        headers=auth_headers(admin),
        json={"monthly_wage": 4000, "yearly_wage": 48000},
    )
    assert saved.status_code == 200

    read = client.get(f"/api/employees/{employee.id}/salary", headers=auth_headers(admin)).json()["data"]
    assert read["monthly_wage"] == 4000


def test_new_hire_can_file_leave_over_http(client, admin, auth_headers):
    created = client.post(
        "/api/employees",
        headers=auth_headers(admin),
        json={"first_name": "Kate", "last_name": "Lee", "email": "kate.lee@acme.com", "joining_date": "2024-02-01"},
    )
    assert created.status_code == 201
    new_hire = {"X-User-ID": created.json()["data"]["profile"]["id"]}

    allocations = client.get("/api/leave/allocations", headers=new_hire).json()["data"]
    assert {a["leave_type"]: a["total_days"] for a in allocations} == {
        "paid_leave": 20,
        "sick_leave": 12,
        "casual_leave": 10,
    }

    response = _file_leave(client, new_hire)
    assert response.status_code == 201
    assert response.json()["data"]["status"] == "pending"


def test_admin_sets_allocation_over_http(client, admin, employee, outsider, auth_headers):
    url = f"/api/leave/admin/allocations/{employee.id}"

    denied = client.put(url, headers=auth_headers(employee), json={"leave_type": "paid_leave", "total_days": 30})
    assert denied.status_code == 403

    saved = client.put(url, headers=auth_headers(admin), json={"leave_type": "paid_leave", "total_days": 5})
    assert saved.status_code == 200
    assert saved.json()["data"]["total_days"] == 5
    assert saved.json()["data"]["year"] == 2024

    listed = client.get(url, headers=auth_headers(admin)).json()["data"]
    assert [a["leave_type"] for a in listed] == ["paid_leave"]

    negative = client.put(url, headers=auth_headers(admin), json={"leave_type": "paid_leave", "total_days": -2})
    assert negative.status_code == 422

    foreign = client.put(
        f"/api/leave/admin/allocations/{outsider.id}",
        headers=auth_headers(admin),
        json={"leave_type": "paid_leave", "total_days": 5},
    )
    assert foreign.status_code == 404

    assert _file_leave(client, auth_headers(employee)).status_code == 201
