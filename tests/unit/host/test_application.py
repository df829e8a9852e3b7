"""Tests for the application services."""

import threading

import pytest

from gimport.host.application import Application, FileDocumentManager, ReadWriteLock, WriteActionError
from gimport.host.jdk import JdkTable, Sdk
from gimport.host.project import Project, ProjectState


@pytest.fixture
def application(config):
    return Application(config, JdkTable())


class TestWriteAction:
    """Commit-or-rollback behaviour of write actions."""

    def test_commit(self, application, tmp_path):
        project = Project(tmp_path.as_posix(), ProjectState(name="app"))
        sdk = Sdk(name="JDK_1.8", home_path="/opt/jdk")

        with application.write_action(application.jdk_table, project):
            application.jdk_table.add_jdk(sdk)
            application.jdk_table.set_project_sdk(project, sdk)

        assert application.jdk_table.find_jdk("JDK_1.8") == sdk
        assert project.sdk == sdk

    def test_rollback_restores_every_participant(self, application, tmp_path):
        project = Project(tmp_path.as_posix(), ProjectState(name="app"))
        sdk = Sdk(name="JDK_1.8", home_path="/opt/jdk")

        with pytest.raises(WriteActionError, match="disk full"):
            with application.write_action(application.jdk_table, project):
                application.jdk_table.add_jdk(sdk)
                application.jdk_table.set_project_sdk(project, sdk)
                raise OSError("disk full")

        assert application.jdk_table.all_jdks() == []
        assert project.sdk is None
        assert project.state.sdk_name is None

    def test_write_inside_read_action(self, application):
        """A read action on the same thread can upgrade to a write."""

        def action():
            with application.write_action():
                return "written"

        assert application.run_read_action(action) == "written"


class TestReadWriteLock:
    def test_writer_waits_for_other_readers(self):
        lock = ReadWriteLock()
        lock.acquire_read()
        acquired = threading.Event()

        def writer():
            lock.acquire_write()
            acquired.set()
            lock.release_write()

        thread = threading.Thread(target=writer)
        thread.start()
        assert not acquired.wait(0.1)

        lock.release_read()
        assert acquired.wait(2)
        thread.join()

    def test_unbalanced_release_raises(self):
        with pytest.raises(RuntimeError):
            ReadWriteLock().release_read()


class TestSaving:
    """Saving is gated on save_allowed."""

    def test_save_refused_until_allowed(self, application, tmp_path):
        target = tmp_path / "doc.json"
        application.documents.set_text(target, "{}")

        assert application.save_all_documents() == 0
        assert not target.exists()

        application.save_allowed = True
        assert application.save_all_documents() == 1
        assert target.read_text() == "{}"
        assert application.documents.unsaved_documents == []

    def test_settings_round_trip(self, application, config):
        application.save_allowed = True
        application.jdk_table.add_jdk(Sdk(name="JDK_1.8", home_path="/opt/jdk", version_string="1.8.0"))
        application.save_settings()

        fresh = Application(config, JdkTable())
        fresh.load_settings()
        assert fresh.jdk_table.find_jdk("JDK_1.8") == Sdk("JDK_1.8", "/opt/jdk", "1.8.0")

    def test_settings_not_written_when_disallowed(self, application, config):
        application.save_settings()
        assert not config.jdk_table_file.exists()


class TestExit:
    def test_exit_saves_and_raises(self, application, config, tmp_path):
        application.save_allowed = True
        application.documents.set_text(tmp_path / "pending.txt", "x")

        with pytest.raises(SystemExit) as exc_info:
            application.exit(force=True, confirm=True, exit_code=1)

        assert exc_info.value.code == 1
        assert (tmp_path / "pending.txt").read_text() == "x"
        assert config.jdk_table_file.exists()

    def test_unconfirmed_exit_returns(self, application):
        application.exit(confirm=False, exit_code=1)

    def test_forced_exit_survives_save_errors(self, application, tmp_path):
        application.save_allowed = True
        blocker = tmp_path / "file"
        blocker.write_text("")
        application.documents.set_text(blocker / "child.txt", "x")

        with pytest.raises(SystemExit) as exc_info:
            application.exit(force=True, exit_code=0)
        assert exc_info.value.code == 0

    def test_unforced_exit_propagates_save_errors(self, application, tmp_path):
        application.save_allowed = True
        blocker = tmp_path / "file"
        blocker.write_text("")
        application.documents.set_text(blocker / "child.txt", "x")

        with pytest.raises(OSError):
            application.exit(force=False, exit_code=0)


class TestFileDocumentManager:
    def test_latest_text_wins(self, tmp_path):
        documents = FileDocumentManager()
        documents.set_text(tmp_path / "a.json", "1")
        documents.set_text(tmp_path / "a.json", "2")

        assert documents.save_all_documents() == 1
        assert (tmp_path / "a.json").read_text() == "2"
        assert not (tmp_path / "a.json.tmp").exists()

    def test_discard_under_drops_only_matching_buffers(self, tmp_path):
        documents = FileDocumentManager()
        documents.set_text(tmp_path / "app" / ".gimport" / "modules" / "app.json", "{}")
        documents.set_text(tmp_path / "other" / "keep.json", "{}")

        assert documents.discard_under(tmp_path / "app" / ".gimport") == 1
        assert documents.unsaved_documents == [tmp_path / "other" / "keep.json"]
