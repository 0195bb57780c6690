import pytest

from conftest import student_payload, teacher_payload


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/api/users/health").json() == {"status": "ok"}

def test_metrics_endpoint(client):
    client.get("/health")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "http_requests_total" in response.text

# --- create

def test_create_student_success(client):
    """Успешное создание студента"""
    response = client.post("/api/users/students", json=student_payload())
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "student"
    assert data["full_name"] == "Luis Garcia Lopez"
    assert data["active"] is True
    assert data["enrollment_code"] == "A2024001"
    assert data["unique_identifier"] == "A2024001"
    assert data["employee_code"] is None
    assert data["created_at"] is not None
    assert data["updated_at"] is not None

def test_create_student_full_name_without_second_surname(client):
    response = client.post("/api/users/students", json=student_payload(second_surname=None))
    assert response.json()["full_name"] == "Luis Garcia"

def test_create_teacher_without_employee_code(client):
    """Преподаватель без табельного номера, затем дубликат email"""
    response = client.post("/api/users/teachers", json=teacher_payload())
    assert response.status_code == 201
    assert response.json()["employee_code"] is None
    assert response.json()["unique_identifier"] == "ana@x.com"

    duplicate = client.post("/api/users/teachers", json=teacher_payload(name="Anita"))
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"]["code"] == "DUPLICATE_EMAIL"

def test_duplicate_email_across_roles_not_persisted(client):
    client.post("/api/users/teachers", json=teacher_payload())
    response = client.post("/api/users/students", json=student_payload(email="ana@x.com"))
    assert response.status_code == 409
    assert client.get("/api/users/count").json() == {"count": 1}

@pytest.mark.parametrize("missing", ["enrollment_code", "program_id", "division_id"])
def test_create_student_missing_field(client, missing):
    """Без обязательного поля студент не создаётся"""
    payload = student_payload()
    payload.pop(missing)
    response = client.post("/api/users/students", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MISSING_REQUIRED_FIELD"
    assert client.get("/api/users/count").json() == {"count": 0}

def test_create_student_duplicate_enrollment_code(client):
    client.post("/api/users/students", json=student_payload())
    response = client.post("/api/users/students", json=student_payload(email="other@example.com"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_ENROLLMENT_CODE"

def test_create_tutor_duplicate_employee_code(client):
    client.post("/api/users/tutors", json=teacher_payload(employee_code="EMP-1"))
    response = client.post("/api/users/teachers", json=teacher_payload(email="eva@example.com", employee_code="EMP-1"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_EMPLOYEE_CODE"

def test_create_administrator_drops_student_fields(client):
    response = client.post("/api/users/administrators", json=student_payload(email="root@example.com"))
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "administrator"
    assert data["enrollment_code"] is None
    assert data["program_id"] is None

def test_create_generic_with_role(client):
    response = client.post("/api/users", json=teacher_payload(role="Tutor"))
    assert response.status_code == 201
    assert response.json()["role"] == "tutor"

def test_create_generic_without_role(client):
    response = client.post("/api/users", json=teacher_payload())
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "MISSING_REQUIRED_FIELD"

def test_create_generic_invalid_role(client):
    response = client.post("/api/users", json=teacher_payload(role="janitor"))
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_ROLE"

@pytest.mark.parametrize("override", [
    {"email": "not-an-email"},
    {"phone": "12345"},
    {"enrollment_code": "A1"},
    {"program_id": 0},
    {"program_id": 10**20},
    {"division_id": 2**63},
    {"name": "L"},
])
def test_create_rejects_malformed_payload(client, override):
    """Ошибки формата отсекает схема (422)"""
    response = client.post("/api/users/students", json=student_payload(**override))
    assert response.status_code == 422

# --- read

def test_get_user_not_found(client):
    assert client.get("/api/users/999").status_code == 404

def test_get_student_by_enrollment_code(client):
    client.post("/api/users/students", json=student_payload())
    response = client.get("/api/users/students/enrollment/A2024001")
    assert response.status_code == 200
    assert response.json()["email"] == "luis@example.com"
    assert client.get("/api/users/students/enrollment/NOPE1").status_code == 404

def test_get_staff_by_employee_code(client):
    client.post("/api/users/tutors", json=teacher_payload(employee_code="EMP-7"))
    response = client.get("/api/users/staff/employee/EMP-7")
    assert response.status_code == 200
    assert response.json()["role"] == "tutor"
    assert client.get("/api/users/staff/employee/EMP-8").status_code == 404

def test_exists_endpoints(client):
    client.post("/api/users/students", json=student_payload())
    assert client.get("/api/users/email/exists", params={"email": "luis@example.com"}).json() == {"exists": True}
    assert client.get("/api/users/email/exists", params={"email": "x@example.com"}).json() == {"exists": False}
    assert client.get("/api/users/enrollment/exists", params={"enrollment_code": "A2024001"}).json() == {"exists": True}
    assert client.get("/api/users/employee/exists", params={"employee_code": "EMP-1"}).json() == {"exists": False}

# --- update

def test_update_keeps_own_enrollment_code(client):
    """Обновление с тем же матрикулом проходит"""
    user_id = client.post("/api/users/students", json=student_payload()).json()["id"]
    response = client.put(f"/api/users/{user_id}", json=student_payload(name="Luisa", role="student"))
    assert response.status_code == 200
    assert response.json()["name"] == "Luisa"
    assert response.json()["enrollment_code"] == "A2024001"

def test_update_to_taken_enrollment_code(client):
    client.post("/api/users/students", json=student_payload())
    other = client.post("/api/users/students", json=student_payload(email="b@example.com", enrollment_code="B2024002")).json()
    response = client.put(f"/api/users/{other['id']}", json=student_payload(email="b@example.com"))
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_ENROLLMENT_CODE"

def test_update_to_taken_email(client):
    client.post("/api/users/teachers", json=teacher_payload())
    other = client.post("/api/users/teachers", json=teacher_payload(email="eva@example.com")).json()
    response = client.put(f"/api/users/{other['id']}", json=teacher_payload())
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "DUPLICATE_EMAIL"

def test_update_role_change_rejected(client):
    user_id = client.post("/api/users/students", json=student_payload()).json()["id"]
    response = client.put(f"/api/users/{user_id}", json=student_payload(role="teacher"))
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "ROLE_CHANGE_NOT_ALLOWED"

def test_update_preserves_created_at_and_active(client):
    created = client.post("/api/users/teachers", json=teacher_payload()).json()
    client.delete(f"/api/users/{created['id']}")
    updated = client.put(f"/api/users/{created['id']}", json=teacher_payload(phone="5512345678")).json()
    assert updated["created_at"] == created["created_at"]
    assert updated["active"] is False
    assert updated["phone"] == "5512345678"

def test_update_not_found(client):
    assert client.put("/api/users/999", json=teacher_payload()).status_code == 404

# --- logical deletion

def test_deactivate_and_reactivate(client):
    """Логическое удаление и восстановление"""
    user_id = client.post("/api/users/students", json=student_payload()).json()["id"]

    response = client.delete(f"/api/users/{user_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "user deactivated", "id": user_id}

    fetched = client.get(f"/api/users/{user_id}")
    assert fetched.status_code == 200
    assert fetched.json()["active"] is False
    assert client.get("/api/users", params={"active": True}).json()["total_items"] == 0
    assert client.get("/api/users/students/simple").json() == []

    reactivated = client.patch(f"/api/users/{user_id}/reactivate")
    assert reactivated.status_code == 200
    assert reactivated.json()["active"] is True
    assert client.get("/api/users", params={"active": True}).json()["total_items"] == 1

def test_deactivate_not_found(client):
    assert client.delete("/api/users/999").status_code == 404
    assert client.patch("/api/users/999/reactivate").status_code == 404

# --- listing and search

def test_list_users_pagination(client):
    for i in range(12):
        client.post("/api/users/teachers", json=teacher_payload(email=f"t{i}@example.com"))
    first = client.get("/api/users", params={"page": 0, "size": 5}).json()
    assert len(first["items"]) == 5
    assert first["total_items"] == 12
    assert first["total_pages"] == 3
    last = client.get("/api/users", params={"page": 2, "size": 5}).json()
    assert len(last["items"]) == 2

def test_list_users_invalid_params(client):
    assert client.get("/api/users", params={"size": 0}).status_code == 422
    assert client.get("/api/users", params={"page": -1}).status_code == 422
    assert client.get("/api/users", params={"sort_dir": "up"}).status_code == 422
    response = client.get("/api/users", params={"sort_by": "password"})
    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_SORT_FIELD"
    assert client.get("/api/users", params={"role": "janitor"}).status_code == 400

def test_list_by_role(client):
    client.post("/api/users/students", json=student_payload())
    client.post("/api/users/teachers", json=teacher_payload())
    client.post("/api/users/tutors", json=teacher_payload(email="tutor@example.com", name="Tere"))
    client.post("/api/users/administrators", json=teacher_payload(email="root@example.com", name="Raul"))

    assert client.get("/api/users/students").json()["total_items"] == 1
    assert [u["name"] for u in client.get("/api/users/teachers").json()["items"]] == ["Ana"]
    assert [u["name"] for u in client.get("/api/users/tutors/simple").json()] == ["Tere"]
    assert [u["name"] for u in client.get("/api/users/teachers/simple").json()] == ["Ana"]
    assert [u["name"] for u in client.get("/api/users/administrators").json()] == ["Raul"]
    assert client.get("/api/users", params={"role": "tutor"}).json()["total_items"] == 1
    assert client.get("/api/users/count", params={"role": "student", "active": True}).json() == {"count": 1}

def test_list_students_by_program(client):
    client.post("/api/users/students", json=student_payload())
    client.post("/api/users/students", json=student_payload(email="b@example.com", enrollment_code="B2024002", program_id=5))
    page = client.get("/api/users/students", params={"program_id": 5}).json()
    assert page["total_items"] == 1
    assert page["items"][0]["program_id"] == 5

def test_list_students_rejects_out_of_range_filter(client):
    """Слишком большой id отсекается валидацией, а не падает в драйвере"""
    assert client.get("/api/users/students", params={"program_id": 10**20}).status_code == 422
    assert client.get("/api/users/students", params={"division_id": 2**63}).status_code == 422

def test_user_id_out_of_range(client):
    assert client.get(f"/api/users/{10**20}").status_code == 422
    assert client.delete(f"/api/users/{10**20}").status_code == 422

def test_create_teacher_with_blank_second_surname(client):
    response = client.post("/api/users/teachers", json=teacher_payload(second_surname="   "))
    assert response.status_code == 201
    assert response.json()["full_name"] == "Ana Ruiz"
    assert response.json()["second_surname"] is None

def test_search(client):
    client.post("/api/users/students", json=student_payload())
    client.post("/api/users/teachers", json=teacher_payload())
    assert client.get("/api/users/search/name", params={"q": "lui"}).json()["total_items"] == 1
    assert client.get("/api/users/search/surname", params={"q": "RUIZ"}).json()["total_items"] == 1
    assert client.get("/api/users/search/email", params={"q": "example"}).json()["total_items"] == 1
    assert client.get("/api/users/search/name").status_code == 422
