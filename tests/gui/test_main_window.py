import pytest

from core.models.frames import HiddenFramesPlaceholder
from core.service import StackSnackService
from core.view_builder import count_frames
from gui.delegates.hidden_frame_delegate import HiddenFrameDelegate, make_hidden_frame_delegate
from gui.main_window import MainWindow


@pytest.fixture
def window(qtbot, config):
    config.set_hide_library_frames(True)
    config.set_restrict_to_project_root(False)
    window = MainWindow(app_config=config)
    service = StackSnackService(window, config, renderer_factory=make_hidden_frame_delegate, parent=window)
    window.attach_service(service)
    qtbot.addWidget(window)
    window.show()
    qtbot.waitExposed(window)
    return window


def _placeholders(entries):
    return [e for e in entries if isinstance(e, HiddenFramesPlaceholder)]


def _settled_filtered(window, tab):
    entries = tab.model.entries()
    controller = window.service.controller_for(tab.session)
    return (
        not tab.is_loading
        and controller is not None
        and controller._update_alarm.pending_count() == 0
        and controller._resync_alarm.pending_count() == 0
        and bool(_placeholders(entries))
        and count_frames(entries) == len(tab.session.frames)
    )


def test_pause_sample_collapses_library_frames(qtbot, window):
    session = window.pause_sample()
    tab = window.tab_for(session)
    assert len(session.frames) > tab.BATCH_SIZE

    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    entries = tab.model.entries()
    for left, right in zip(entries, entries[1:]):
        assert not (isinstance(left, HiddenFramesPlaceholder) and isinstance(right, HiddenFramesPlaceholder))
    # The callback at the 'breakpoint' belongs to the project and stays selected
    assert entries[0] is session.current_frame
    assert tab.frame_view.currentIndex().row() == 0
    assert isinstance(tab.frame_view.itemDelegate(), HiddenFrameDelegate)


def test_toggle_off_restores_every_frame(qtbot, window):
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    window.toggle_hide_action.setChecked(False)

    qtbot.waitUntil(
        lambda: not tab.is_loading and tab.model.rowCount() == len(session.frames), timeout=3000
    )
    assert _placeholders(tab.model.entries()) == []
    assert window.app_config.get_hide_library_frames() is False


def test_toggle_on_filters_paused_session(qtbot, window, config):
    window.toggle_hide_action.setChecked(False)
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: not tab.is_loading, timeout=3000)
    qtbot.wait(50)
    assert _placeholders(tab.model.entries()) == []

    window.toggle_hide_action.setChecked(True)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)


def test_selecting_placeholder_shows_hidden_count(qtbot, window):
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    row = next(i for i, e in enumerate(tab.model.entries()) if isinstance(e, HiddenFramesPlaceholder))
    tab.frame_view.setCurrentIndex(tab.model.index(row, 0))

    assert isinstance(session.current_frame, HiddenFramesPlaceholder)
    assert "hidden frame" in tab.position_label.text()
    # Placeholder rows are not rebuilt away under the user's selection
    qtbot.wait(50)
    assert tab.model.entries()[row] is session.current_frame


def test_selected_placeholder_survives_refilter(qtbot, window):
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    row = next(i for i, e in enumerate(tab.model.entries()) if isinstance(e, HiddenFramesPlaceholder))
    tab.frame_view.setCurrentIndex(tab.model.index(row, 0))
    old_placeholder = session.current_frame

    controller = window.service.controller_for(session)
    with qtbot.waitSignal(controller.pass_finished, timeout=1000) as blocker:
        window.service.force_refresh()
    assert blocker.args == [True]

    assert tab.frame_view.currentIndex().row() == row
    assert session.current_frame is tab.model.entries()[row]
    assert session.current_frame is not old_placeholder
    assert "hidden frame" in tab.position_label.text()


def test_resume_and_stop_clear_the_list(qtbot, window):
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    window.resume_current()
    assert tab.model.rowCount() == 0
    assert not window.resume_action.isEnabled()

    window.stop_current()
    assert session.is_stopped
    assert window.service.controller_for(session) is None


def test_sessions_in_services_panel(qtbot, window):
    session = window.new_session("Service A", in_services=True)
    assert window.services_dock.isVisible()
    window.pause_sample()
    tab = window.tab_for(session)

    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)
    assert window.services_tabs.currentWidget() is tab


def test_switching_tabs_changes_current_session(qtbot, window):
    first = window.new_session("First")
    second = window.new_session("Second")
    assert window.current_session() is second

    window.debug_tabs.setCurrentWidget(window.tab_for(first))
    assert window.current_session() is first


def test_settings_change_refilters_all_sessions(qtbot, window, config):
    session = window.pause_sample()
    tab = window.tab_for(session)
    qtbot.waitUntil(lambda: _settled_filtered(window, tab), timeout=3000)

    config.set_hide_library_frames(False)
    window._on_settings_changed()

    assert not window.toggle_hide_action.isChecked()
    qtbot.waitUntil(
        lambda: not tab.is_loading and tab.model.rowCount() == len(session.frames), timeout=3000
    )


def test_close_stops_sessions(qtbot, window):
    session = window.pause_sample()
    window.close()
    assert session.is_stopped
