"""Tests for the workspace and global auto-enable mode."""

import pytest

from columnmark.config import OverflowSettings
from columnmark.mode import GlobalOverflowMode, ModeController
from columnmark.session import SessionKeys, get_session
from columnmark.workspace import Workspace


@pytest.fixture(autouse=True)
def clean_session():
    get_session().clear()


def test_open_hooks_run_for_new_documents():
    workspace = Workspace()
    opened = []
    workspace.add_open_hook(opened.append)
    doc = workspace.open_text("hello", name="greeting")
    assert opened == [doc]
    workspace.remove_open_hook(opened.append)
    workspace.open_text("again")
    assert opened == [doc]


def test_global_mode_enables_code_on_open():
    workspace = Workspace()
    GlobalOverflowMode(workspace).enable()
    code = workspace.open_text("x" * 100, filename="main.py")
    prose = workspace.open_text("y" * 100, filename="notes.md")
    assert ModeController.for_document(code).enabled
    assert len(ModeController.for_document(code).markers) == 1
    assert not ModeController.for_document(prose).enabled
    assert ModeController.for_document(prose).markers == []


def test_global_mode_applies_to_already_open_documents():
    workspace = Workspace()
    doc = workspace.open_text("x" * 100, filename="main.py")
    GlobalOverflowMode(workspace).enable()
    assert ModeController.for_document(doc).enabled


def test_global_mode_uses_its_settings():
    workspace = Workspace()
    GlobalOverflowMode(workspace, OverflowSettings(column_limit=50)).enable()
    doc = workspace.open_text("x" * 60, filename="main.py")
    (marker,) = ModeController.for_document(doc).markers
    assert marker.overflow_start == 50


def test_existing_controller_settings_are_kept():
    workspace = Workspace()
    GlobalOverflowMode(workspace, OverflowSettings(column_limit=50)).enable()
    from columnmark.model import Document
    doc = Document("x" * 60, filename="main.py")
    ModeController.for_document(doc, OverflowSettings(column_limit=55))
    workspace.add_document(doc)
    (marker,) = ModeController.for_document(doc).markers
    assert marker.overflow_start == 55


def test_global_disable_turns_documents_off():
    workspace = Workspace()
    global_mode = GlobalOverflowMode(workspace)
    global_mode.enable()
    doc = workspace.open_text("x" * 100, filename="main.py")
    global_mode.disable()
    assert not ModeController.for_document(doc).enabled
    assert ModeController.for_document(doc).markers == []
    later = workspace.open_text("x" * 100, filename="other.py")
    assert not ModeController.for_document(later).enabled


def test_global_mode_flag_in_session():
    workspace = Workspace()
    global_mode = GlobalOverflowMode(workspace)
    global_mode.toggle()
    assert get_session().get(SessionKeys.GLOBAL_MODE) is True
    global_mode.toggle()
    assert get_session().get(SessionKeys.GLOBAL_MODE) is False


def test_close_document_disables_mode():
    workspace = Workspace()
    GlobalOverflowMode(workspace).enable()
    doc = workspace.open_text("x" * 100, filename="main.py")
    workspace.close_document(doc)
    assert doc not in workspace.documents
    assert not ModeController.for_document(doc).enabled
    assert doc.overlays == []


def test_open_file(tmp_path):
    path = tmp_path / "script.py"
    path.write_text("y" * 90 + "\n", encoding="utf-8")
    workspace = Workspace()
    GlobalOverflowMode(workspace).enable()
    doc = workspace.open_file(str(path))
    assert doc.filename == str(path)
    assert len(ModeController.for_document(doc).markers) == 1


def test_restore_reads_global_flag_from_session():
    workspace = Workspace()
    assert GlobalOverflowMode.restore(workspace).enabled is False

    GlobalOverflowMode(workspace).enable()
    # A later workspace in the same process picks the flag back up
    later = Workspace()
    restored = GlobalOverflowMode.restore(later)
    assert restored.enabled is True
    code = later.open_text("x" * 100, filename="main.py")
    assert ModeController.for_document(code).enabled


def test_restore_stays_off_after_disable():
    workspace = Workspace()
    mode = GlobalOverflowMode(workspace)
    mode.enable()
    mode.disable()
    assert GlobalOverflowMode.restore(Workspace()).enabled is False
