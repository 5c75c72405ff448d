import pytest

from utils import store
from utils.database import StoreError
from utils.scheduling import ApplicationNotFound, interview_message, schedule_interview


@pytest.fixture
def applicant(fake_db):
    return fake_db.add_user(), fake_db.add_role()


def notifications_for(fake_db, application_id):
    return fake_db.query("SELECT * FROM Notification WHERE applicationID = %s", (application_id,))


def test_scheduling_moves_applied_to_interview(fake_db, applicant):
    user_id, role_id = applicant
    fake_db.add_application(user_id, role_id, status="Applied", application_id=42)

    interview, application = schedule_interview(42, "2024-03-01", "Online")

    assert interview["applicationID"] == 42
    assert interview["interviewMode"] == "Online"
    assert interview["result"] == "Pending"
    assert application["status"] == "Interview"

    rows = notifications_for(fake_db, 42)
    assert len(rows) == 1
    assert "Interview scheduled on 2024-03-01" in rows[0]["type"]
    assert rows[0]["delivered"] == 0
    assert rows[0]["isRead"] == 0


def test_rejected_application_keeps_status_but_still_notifies(fake_db, applicant):
    user_id, role_id = applicant
    fake_db.add_application(user_id, role_id, status="Rejected", application_id=7)

    _, application = schedule_interview(7, "2024-03-05", "Offline")

    assert application["status"] == "Rejected"
    assert len(notifications_for(fake_db, 7)) == 1


def test_second_interview_does_not_rewrite_status(fake_db, applicant, monkeypatch):
    user_id, role_id = applicant
    app_id = fake_db.add_application(user_id, role_id, status="Interview")
    calls = []
    monkeypatch.setattr(store, "set_application_status", lambda *a: calls.append(a))

    schedule_interview(app_id, "2024-03-09", "Online")

    assert calls == []
    assert len(fake_db.query("SELECT * FROM Interview WHERE applicationID = %s", (app_id,))) == 1
    assert len(notifications_for(fake_db, app_id)) == 1


def test_notification_failure_does_not_fail_scheduling(fake_db, applicant, monkeypatch):
    user_id, role_id = applicant
    app_id = fake_db.add_application(user_id, role_id)

    def broken(*args, **kwargs):
        raise StoreError("notification table locked")

    monkeypatch.setattr(store, "insert_notification", broken)

    interview, application = schedule_interview(app_id, "2024-03-01", "Online")

    assert interview is not None
    assert application["status"] == "Interview"
    assert notifications_for(fake_db, app_id) == []


def test_interview_insert_failure_propagates(fake_db, applicant, monkeypatch):
    user_id, role_id = applicant
    app_id = fake_db.add_application(user_id, role_id)

    def broken(*args, **kwargs):
        raise StoreError("insert failed")

    monkeypatch.setattr(store, "insert_interview", broken)

    with pytest.raises(StoreError):
        schedule_interview(app_id, "2024-03-01", "Online")

    assert fake_db.query("SELECT status FROM JobApplication WHERE applicationID = %s", (app_id,)) == [{"status": "Applied"}]
    assert notifications_for(fake_db, app_id) == []


def test_unknown_application(fake_db):
    with pytest.raises(ApplicationNotFound):
        schedule_interview(404, "2024-03-01", "Online")
    assert fake_db.query("SELECT * FROM Interview") == []


def test_admin_reference_is_recorded(fake_db, applicant):
    user_id, role_id = applicant
    app_id = fake_db.add_application(user_id, role_id)

    schedule_interview(app_id, "2024-03-01", "Online", admin_id=2, interview_time="10:30")

    row = notifications_for(fake_db, app_id)[0]
    assert row["adminID"] == 2
    assert row["type"] == "Interview scheduled on 2024-03-01 at 10:30"


def test_interview_message():
    assert interview_message("2024-03-01") == "Interview scheduled on 2024-03-01"
