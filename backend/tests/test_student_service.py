import json

from sqlalchemy import event

from student_portal.config import settings
from student_portal.database import engine
from student_portal.repositories import AddressRepository
from student_portal.schemas import StudentDTO
from student_portal.services import StudentService


def _body(resp):
    return json.loads(resp.body)


def _register(svc, payload):
    resp = svc.register_student(StudentDTO.model_validate(payload))
    assert resp.status_code == 200
    return _body(resp)["response"]


def _boom(*_args, **_kwargs):
    raise RuntimeError("database is gone")


def test_register_echoes_stored_record(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)
    assert stored["id"] is not None
    assert stored["name"] == "Asha"
    assert stored["studentClass"] == "5A"
    assert len(stored["addresses"]) == 1
    assert stored["addresses"][0]["flatNo"] == "12B"
    assert stored["addresses"][0]["id"] is not None


def test_register_failure_returns_register_error(session, asha, monkeypatch):
    svc = StudentService(session)
    monkeypatch.setattr(svc.student_repo, "save", _boom)
    resp = svc.register_student(StudentDTO.model_validate(asha))
    assert resp.status_code == 500
    assert _body(resp) == {"error": {"errorMessage": "Error registering student", "errorCode": "ERR_STUDENT_REGISTER"}}


def test_get_student_by_id_found_and_missing(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)

    found = svc.get_student_by_id(stored["id"])
    assert found.status_code == 200
    body = _body(found)
    assert "error" not in body
    assert body["response"] == {
        "id": stored["id"],
        "name": "Asha",
        "studentClass": "5A",
        "age": 10,
        "addresses": [{"flatNo": "12B", "city": "Pune", "state": "MH"}],
    }

    missing = svc.get_student_by_id(stored["id"] + 1)
    assert missing.status_code == 404
    assert _body(missing) == {"error": {"errorMessage": "Student not found", "errorCode": "STD_NOT_FOUND"}}


def test_get_student_by_id_internal_error(session, monkeypatch):
    svc = StudentService(session)
    monkeypatch.setattr(svc.student_repo, "find_by_id", _boom)
    resp = svc.get_student_by_id(1)
    assert resp.status_code == 500
    assert _body(resp)["error"]["errorCode"] == "INTERNAL_SERVER_ERROR"


def test_register_with_n_addresses(session):
    svc = StudentService(session)
    for n in (0, 1, 3):
        addresses = [{"flatNo": f"F{i}", "city": f"C{i}", "state": "KA"} for i in range(n)]
        stored = _register(svc, {"name": f"N{n}", "studentClass": "2A", "age": 7, "addresses": addresses})
        fetched = _body(svc.get_student_by_id(stored["id"]))["response"]
        assert fetched["addresses"] == addresses


def test_update_replaces_everything(session, asha):
    svc = StudentService(session)
    stored = _register(svc, {**asha, "addresses": asha["addresses"] * 2})
    old_ids = {a["id"] for a in stored["addresses"]}

    replacement = {
        "name": "Asha K",
        "studentClass": "6A",
        "age": 11,
        "addresses": [
            {"flatNo": "1", "city": "Mumbai", "state": "MH"},
            {"flatNo": "2", "city": "Nagpur", "state": "MH"},
            {"flatNo": "3", "city": "Goa", "state": "GA"},
        ],
    }
    resp = svc.update_student(stored["id"], StudentDTO.model_validate(replacement))
    assert resp.status_code == 200
    assert _body(resp)["response"] == {"id": stored["id"], **replacement}

    fetched = _body(svc.get_student_by_id(stored["id"]))["response"]
    assert fetched["addresses"] == replacement["addresses"]
    rows = AddressRepository(session).find_by_student(stored["id"])
    assert len(rows) == 3
    assert old_ids.isdisjoint({r.id for r in rows})
    assert AddressRepository(session).count() == 3


def test_update_overwrites_absent_fields(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)
    resp = svc.update_student(stored["id"], StudentDTO.model_validate({"name": "Only name"}))
    assert _body(resp)["response"] == {
        "id": stored["id"],
        "name": "Only name",
        "studentClass": None,
        "age": 0,
        "addresses": [],
    }


def test_update_missing_student(session, asha):
    svc = StudentService(session)
    resp = svc.update_student(999, StudentDTO.model_validate(asha))
    assert resp.status_code == 404
    assert _body(resp)["error"]["errorCode"] == "STD_NOT_FOUND"
    assert AddressRepository(session).count() == 0


def test_delete_then_get_is_not_found(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)
    resp = svc.delete_student(stored["id"])
    assert resp.status_code == 200
    assert _body(resp) == {"response": f"Student deleted with ID: {stored['id']}"}
    assert svc.get_student_by_id(stored["id"]).status_code == 404
    assert AddressRepository(session).count() == 0


def test_delete_missing_has_no_side_effects(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)
    resp = svc.delete_student(stored["id"] + 1)
    assert resp.status_code == 404
    assert _body(resp)["error"]["errorCode"] == "STD_NOT_FOUND"
    assert len(_body(svc.get_all_students())["response"]) == 1


def test_students_by_class_pages_are_one_based(session):
    svc = StudentService(session)
    for i in range(5):
        _register(svc, {"name": f"S{i}", "studentClass": "3B", "age": 8})
    _register(svc, {"name": "X", "studentClass": "3C", "age": 8})

    page1 = _body(svc.get_students_by_class("3B", 1, 2))["response"]
    assert [s["name"] for s in page1] == ["S0", "S1"]
    assert all(s["studentClass"] == "3B" for s in page1)
    page3 = _body(svc.get_students_by_class("3B", 3, 2))["response"]
    assert [s["name"] for s in page3] == ["S4"]
    out_of_range = svc.get_students_by_class("3B", 50, 2)
    assert out_of_range.status_code == 200
    assert _body(out_of_range) == {"response": []}


def test_students_by_class_respects_configured_cap(session, monkeypatch):
    svc = StudentService(session)
    for i in range(4):
        _register(svc, {"name": f"S{i}", "studentClass": "3B"})
    monkeypatch.setattr(settings, "MAX_PAGE_SIZE", 3)
    page = _body(svc.get_students_by_class("3B", 1, 100))["response"]
    assert len(page) == 3


def test_invalid_page_becomes_internal_error(session):
    resp = StudentService(session).get_students_by_class("3B", 0, 2)
    assert resp.status_code == 500
    assert _body(resp)["error"] == {
        "errorMessage": "Error while Retrieving students of class",
        "errorCode": "INTERNAL_SERVER_ERROR",
    }


def test_get_all_students(session, asha, monkeypatch):
    svc = StudentService(session)
    assert _body(svc.get_all_students()) == {"response": []}
    _register(svc, asha)
    _register(svc, {**asha, "name": "Bilal"})
    assert [s["name"] for s in _body(svc.get_all_students())["response"]] == ["Asha", "Bilal"]

    monkeypatch.setattr(svc.student_repo, "find_all", _boom)
    failed = svc.get_all_students()
    assert failed.status_code == 500
    assert _body(failed)["error"]["errorCode"] == "INTERNAL_SERVER_ERROR"


def test_update_failure_keeps_previous_student_and_addresses(session, asha):
    svc = StudentService(session)
    stored = _register(svc, asha)

    def fail_address_insert(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("INSERT INTO ADDRESS"):
            raise RuntimeError("address insert rejected")

    replacement = {
        "name": "Changed",
        "studentClass": "9Z",
        "age": 40,
        "addresses": [{"flatNo": "1", "city": "Mumbai", "state": "MH"}, {"flatNo": "2", "city": "Goa", "state": "GA"}],
    }
    event.listen(engine, "before_cursor_execute", fail_address_insert)
    try:
        resp = svc.update_student(stored["id"], StudentDTO.model_validate(replacement))
    finally:
        event.remove(engine, "before_cursor_execute", fail_address_insert)

    assert resp.status_code == 500
    assert _body(resp) == {"error": {"errorMessage": "Error while updating student", "errorCode": "INTERNAL_SERVER_ERROR"}}
    fetched = _body(svc.get_student_by_id(stored["id"]))["response"]
    assert fetched["name"] == "Asha"
    assert fetched["studentClass"] == "5A"
    assert fetched["addresses"] == asha["addresses"]
    rows = AddressRepository(session).find_by_student(stored["id"])
    assert [r.id for r in rows] == [a["id"] for a in stored["addresses"]]


def test_update_save_error_returns_internal_error(session, asha, monkeypatch):
    svc = StudentService(session)
    stored = _register(svc, asha)
    monkeypatch.setattr(svc.student_repo, "save", _boom)
    resp = svc.update_student(stored["id"], StudentDTO.model_validate({**asha, "name": "Other"}))
    assert resp.status_code == 500
    assert _body(resp)["error"] == {"errorMessage": "Error while updating student", "errorCode": "INTERNAL_SERVER_ERROR"}
    monkeypatch.undo()
    assert _body(svc.get_student_by_id(stored["id"]))["response"]["name"] == "Asha"


def test_delete_error_returns_internal_error(session, asha, monkeypatch):
    svc = StudentService(session)
    stored = _register(svc, asha)
    monkeypatch.setattr(svc.student_repo, "delete_by_id", _boom)
    resp = svc.delete_student(stored["id"])
    assert resp.status_code == 500
    assert _body(resp)["error"] == {"errorMessage": "INTERNAL_SERVER_ERROR", "errorCode": "INTERNAL_SERVER_ERROR"}
    monkeypatch.undo()
    assert svc.get_student_by_id(stored["id"]).status_code == 200


def test_out_of_range_ids_are_not_found(session):
    svc = StudentService(session)
    huge = 10**20
    assert _body(svc.get_student_by_id(huge))["error"]["errorCode"] == "STD_NOT_FOUND"
    assert svc.update_student(huge, StudentDTO()).status_code == 404
    assert svc.delete_student(huge).status_code == 404
