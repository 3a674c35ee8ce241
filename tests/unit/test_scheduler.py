from core.scheduler import UpdateAlarm


def test_request_fires_once(qtbot):
    alarm = UpdateAlarm()
    calls = []
    alarm.add_request(lambda: calls.append("run"), 5)
    assert alarm.pending_count() == 1

    qtbot.waitUntil(lambda: calls == ["run"], timeout=1000)
    assert alarm.pending_count() == 0
    qtbot.wait(20)
    assert calls == ["run"]


def test_requests_run_in_delay_order(qtbot):
    alarm = UpdateAlarm()
    calls = []
    alarm.add_request(lambda: calls.append("late"), 40)
    alarm.add_request(lambda: calls.append("early"), 0)

    qtbot.waitUntil(lambda: len(calls) == 2, timeout=1000)
    assert calls == ["early", "late"]


def test_cancel_all_requests(qtbot):
    alarm = UpdateAlarm()
    calls = []
    alarm.add_request(lambda: calls.append("a"), 5)
    alarm.add_request(lambda: calls.append("b"), 5)
    alarm.cancel_all_requests()

    assert alarm.pending_count() == 0
    qtbot.wait(30)
    assert calls == []


def test_disposed_alarm_refuses_requests(qtbot):
    alarm = UpdateAlarm()
    calls = []
    alarm.add_request(lambda: calls.append("a"), 5)
    alarm.dispose()
    alarm.add_request(lambda: calls.append("b"), 0)

    assert alarm.is_disposed()
    assert alarm.pending_count() == 0
    qtbot.wait(30)
    assert calls == []
