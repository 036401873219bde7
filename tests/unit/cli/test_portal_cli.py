"""Typer commands run through CliRunner against tmp paths."""

import json
import time

from typer.testing import CliRunner

from campus_portal.cli import app

runner = CliRunner()


def test_init_db_creates_document(tmp_path):
    db = tmp_path / "db.json"

    result = runner.invoke(app, ["init-db", "--db-path", str(db)])

    assert result.exit_code == 0, result.output
    assert "users: 0" in result.output
    assert json.loads(db.read_text())["calendar"] == []


def test_init_db_keeps_existing_records(tmp_path):
    db = tmp_path / "db.json"
    db.write_text(json.dumps({"courses": [{"id": 1, "name": "A"}]}))

    result = runner.invoke(app, ["init-db", "--db-path", str(db)])

    assert "courses: 1" in result.output
    doc = json.loads(db.read_text())
    assert doc["courses"] == [{"id": 1, "name": "A"}]
    assert doc["forum"] == []


class TestCreateUser:
    def test_creates_user(self, tmp_path):
        db = tmp_path / "db.json"

        result = runner.invoke(app, ["create-user", "ana", "--password", "pw", "--db-path", str(db)])

        assert result.exit_code == 0, result.output
        assert "Created user ana" in result.output
        users = json.loads(db.read_text())["users"]
        assert users[0]["username"] == "ana"
        assert users[0]["password"] != "pw"

    def test_prompts_for_password(self, tmp_path):
        db = tmp_path / "db.json"

        result = runner.invoke(app, ["create-user", "ana", "--db-path", str(db)], input="pw\npw\n")

        assert result.exit_code == 0, result.output

    def test_duplicate_exits_nonzero(self, tmp_path):
        db = tmp_path / "db.json"
        runner.invoke(app, ["create-user", "ana", "--password", "pw", "--db-path", str(db)])

        result = runner.invoke(app, ["create-user", "ana", "--password", "pw", "--db-path", str(db)])

        assert result.exit_code == 1
        assert "Username already taken" in result.output


class TestSweepAttachments:
    def _setup(self, tmp_path):
        db = tmp_path / "db.json"
        uploads = tmp_path / "uploads"
        uploads.mkdir()
        (uploads / "1.png").write_bytes(b"kept")
        (uploads / "2.png").write_bytes(b"orphan")
        db.write_text(json.dumps({"assignments": [{"id": 1, "title": "HW", "image": "1.png"}]}))
        return db, uploads

    def test_dry_run_lists_orphans(self, tmp_path):
        db, uploads = self._setup(tmp_path)

        result = runner.invoke(
            app, ["sweep-attachments", "--db-path", str(db), "--upload-dir", str(uploads), "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "Would remove 2.png" in result.output
        assert (uploads / "2.png").exists()

    def test_removes_orphans(self, tmp_path):
        db, uploads = self._setup(tmp_path)

        result = runner.invoke(app, ["sweep-attachments", "--db-path", str(db), "--upload-dir", str(uploads)])

        assert result.exit_code == 0, result.output
        assert "Removed 1 file(s)" in result.output
        assert sorted(p.name for p in uploads.iterdir()) == ["1.png"]

    def test_recent_files_survive_unless_min_age_is_zero(self, tmp_path):
        db, uploads = self._setup(tmp_path)
        fresh = f"{time.time_ns()}.png"
        (uploads / fresh).write_bytes(b"upload in flight")
        args = ["sweep-attachments", "--db-path", str(db), "--upload-dir", str(uploads)]

        runner.invoke(app, args)
        assert (uploads / fresh).exists()

        result = runner.invoke(app, [*args, "--min-age", "0"])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in uploads.iterdir()) == ["1.png"]
