from __future__ import annotations

import pytest
from typer.testing import CliRunner

import contourz.cli as cli
from contourz.auth import AuthService

from conftest import edges, records

runner = CliRunner()


@pytest.fixture
def use_backend(monkeypatch):
    def install(fake):
        def get_auth():
            service = AuthService(fake)
            service.load()
            return service

        monkeypatch.setattr(cli, "get_auth", get_auth)
        return fake

    return install


def test_whoami_signed_out(use_backend, backend):
    use_backend(backend)
    result = runner.invoke(cli.app, ["whoami"])
    assert result.exit_code == 1
    assert "Not signed in" in result.output


def test_whoami(use_backend, signed_in):
    use_backend(signed_in)
    result = runner.invoke(cli.app, ["whoami"])
    assert result.exit_code == 0
    assert "jane@example.com (Jane Doe)" in result.output


def test_login(use_backend, backend):
    use_backend(backend)
    backend.on("GetProfile", {"profilesCollection": edges({"id": "user-1", "username": "jane"})})
    result = runner.invoke(
        cli.app, ["login", "--email", "jane@example.com", "--password", backend.password]
    )
    assert result.exit_code == 0
    assert "Signed in as jane@example.com" in result.output


def test_login_rejected(use_backend, backend):
    use_backend(backend)
    result = runner.invoke(cli.app, ["login", "--email", "jane@example.com", "--password", "wrongpass"])
    assert result.exit_code == 1
    assert "Invalid login credentials" in result.output


def test_commands_need_a_session(use_backend, backend):
    use_backend(backend)
    result = runner.invoke(cli.app, ["contacts", "list"])
    assert result.exit_code == 1
    assert "You are not signed in" in result.output


def test_contacts_list(use_backend, signed_in):
    use_backend(signed_in)
    signed_in.on("GetContacts", {"contactsCollection": edges({"id": "c1", "name": "Ann"})})
    result = runner.invoke(cli.app, ["contacts", "list"])
    assert result.exit_code == 0
    assert "Ann" in result.output


def test_contacts_add_validation(use_backend, signed_in):
    use_backend(signed_in)
    result = runner.invoke(cli.app, ["contacts", "add", " ", "--email", "bad"])
    assert result.exit_code == 1
    assert "name: Name is required" in result.output
    assert "email: Invalid email address" in result.output


def test_contacts_import(use_backend, signed_in, tmp_path):
    use_backend(signed_in)
    signed_in.on(
        "CreateContact",
        lambda v: {"insertIntocontactsCollection": records({"id": "new", **v})},
    )
    path = tmp_path / "people.csv"
    path.write_text("name,email\nAnn,ann@example.com\nBob,bob@example.com\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["contacts", "import", str(path)])

    assert result.exit_code == 0
    assert "Successfully imported 2 contact(s)" in result.output


def test_contacts_import_unreadable_file(use_backend, signed_in, tmp_path):
    use_backend(signed_in)
    path = tmp_path / "people.csv"
    path.write_bytes("name\nJos\u00e9\n".encode("latin-1"))

    result = runner.invoke(cli.app, ["contacts", "import", str(path)])

    assert result.exit_code == 1
    assert "Please use a UTF-8 CSV file." in result.output
    assert "CreateContact" not in signed_in.operations()


def test_contacts_delete_needs_confirmation(use_backend, signed_in):
    use_backend(signed_in)
    signed_in.on("DeleteContact", {"deleteFromcontactsCollection": {"affectedCount": 1}})

    result = runner.invoke(cli.app, ["contacts", "delete", "c1"], input="n\n")
    assert result.exit_code == 1
    assert "DeleteContact" not in signed_in.operations()

    result = runner.invoke(cli.app, ["contacts", "delete", "c1", "--yes"])
    assert result.exit_code == 0
    assert signed_in.variables("DeleteContact") == {"id": "c1"}


def test_tasks_complete(use_backend, signed_in):
    use_backend(signed_in)
    signed_in.on(
        "UpdateTasks",
        lambda v: {"updatetasksCollection": records({"id": v["id"], "title": "Call Ann", "status": v["status"]})},
    )
    result = runner.invoke(cli.app, ["tasks", "complete", "t1"])
    assert result.exit_code == 0
    assert "Completed Call Ann" in result.output


def test_transactions_add_bad_amount(use_backend, signed_in):
    use_backend(signed_in)
    result = runner.invoke(cli.app, ["transactions", "add", "c1", "lots"])
    assert result.exit_code == 1
    assert "Valid amount is required" in result.output


def test_search_without_results(use_backend, signed_in):
    use_backend(signed_in)
    result = runner.invoke(cli.app, ["search", "nothing"])
    assert result.exit_code == 0
    assert 'No results for "nothing"' in result.output


def test_backend_errors_exit_nonzero(use_backend, signed_in):
    use_backend(signed_in)
    signed_in.on("GetAllMeetings", None, errors=[{"message": "permission denied"}])
    result = runner.invoke(cli.app, ["meetings", "list"])
    assert result.exit_code == 1
    assert "permission denied" in result.output


def test_tags_remove_missing(use_backend, signed_in):
    use_backend(signed_in)
    result = runner.invoke(cli.app, ["tags", "remove", "Gardening"])
    assert result.exit_code == 0
    assert "Gardening is not on your profile" in result.output
    assert "RemoveTagFromProfile" not in signed_in.operations()


def test_tags_remove(use_backend, signed_in):
    use_backend(signed_in)
    signed_in.on("RemoveTagFromProfile", {"deleteFromprofile_tagsCollection": {"affectedCount": 1}})
    result = runner.invoke(cli.app, ["tags", "remove", "design"])
    assert result.exit_code == 0
    assert "Removed design" in result.output
