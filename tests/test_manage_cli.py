import pytest
import manage


def test_parser_contains_commands():
    h = manage.create_parser().format_help()
    for command in ("create_admin", "list_admins", "rotate_admin_password", "deliver_pending"):
        assert command in h


def test_create_admin_requires_email():
    parser = manage.create_parser()
    with pytest.raises(SystemExit):
        # No args for subcommand should trigger error due to required --email
        parser.parse_args(["create_admin"])


def test_create_admin_hashes_password(fake_db):
    assert manage.create_admin_account("Boss@Example.com", "TestPass123!", name="Boss") is True

    rows = fake_db.query("SELECT name, email, password FROM Admin")
    assert len(rows) == 1
    assert rows[0]["email"] == "boss@example.com"
    assert rows[0]["password"].startswith("$2")


def test_create_admin_refuses_duplicate_without_force(fake_db):
    manage.create_admin_account("boss@example.com", "First1!")
    old_hash = fake_db.query("SELECT password FROM Admin")[0]["password"]

    assert manage.create_admin_account("boss@example.com", "Second2!") is False
    assert manage.create_admin_account("boss@example.com", "Second2!", force=True) is True

    assert fake_db.query("SELECT password FROM Admin")[0]["password"] != old_hash
    assert len(fake_db.query("SELECT * FROM Admin")) == 1


def test_create_admin_rejects_bad_email(fake_db):
    assert manage.create_admin_account("not-an-email", "pw") is False


def test_generated_password_written_to_otp_file(fake_db, tmp_path):
    otp_file = tmp_path / "otp.txt"
    rc = manage.main(["create_admin", "--email", "otp@example.com", "--generate-password", "--otp-file", str(otp_file)])

    assert rc == 0
    assert len(otp_file.read_text().strip()) >= 8
    assert fake_db.query("SELECT email FROM Admin") == [{"email": "otp@example.com"}]


def test_list_admins(fake_db, capsys):
    manage.main(["list_admins"])
    assert "No admin accounts found" in capsys.readouterr().out

    manage.create_admin_account("show@example.com", "ShowPass1!")
    manage.main(["list_admins"])
    assert "show@example.com" in capsys.readouterr().out


def test_rotate_admin_password(fake_db):
    manage.create_admin_account("rot@example.com", "Initial1!")
    old_hash = fake_db.query("SELECT password FROM Admin")[0]["password"]

    assert manage.main(["rotate_admin_password", "--email", "rot@example.com", "--password", "Next2!"]) == 0
    assert fake_db.query("SELECT password FROM Admin")[0]["password"] != old_hash
    assert manage.main(["rotate_admin_password", "--email", "nobody@example.com", "--password", "x"]) == 2


def test_deliver_pending_marks_rows(fake_db, capsys):
    user_id = fake_db.add_user()
    app_id = fake_db.add_application(user_id, fake_db.add_role())
    fake_db.add_notification(app_id)
    fake_db.add_notification(app_id)

    assert manage.main(["deliver_pending"]) == 0

    assert "Marked 2 notification(s) delivered" in capsys.readouterr().out
    assert fake_db.query("SELECT delivered FROM Notification") == [{"delivered": 1}, {"delivered": 1}]
