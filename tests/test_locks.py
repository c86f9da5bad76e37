import threading

import pytest

from career.locks import profile_serial_lock, registered_profile_count


def _hold_in_thread(profile_id, timeout_s):
    outcome = {}

    def _worker():
        try:
            with profile_serial_lock(profile_id, reason="status-check", timeout_s=timeout_s):
                outcome["acquired"] = True
        except TimeoutError as exc:
            outcome["error"] = str(exc)

    t = threading.Thread(target=_worker)
    t.start()
    t.join(5)
    return outcome


def test_lock_is_reentrant_in_one_thread():
    with profile_serial_lock("lock-a"):
        with profile_serial_lock("lock-a", timeout_s=0.1):
            pass


def test_other_thread_times_out_while_held():
    with profile_serial_lock("lock-b"):
        outcome = _hold_in_thread("lock-b", 0.05)
    assert "profile_id=lock-b" in outcome["error"]
    assert outcome["error"].endswith(": status-check")

    assert _hold_in_thread("lock-b", 0.05) == {"acquired": True}


def test_different_profiles_do_not_contend():
    with profile_serial_lock("lock-c"):
        assert _hold_in_thread("lock-d", 0.05) == {"acquired": True}


def test_bad_timeout_is_rejected():
    with pytest.raises(ValueError):
        with profile_serial_lock("lock-e", timeout_s="soon"):
            pass


def test_idle_entries_are_evicted():
    before = registered_profile_count()
    with profile_serial_lock("lock-f"):
        with profile_serial_lock("lock-f"):
            assert registered_profile_count() == before + 1
        assert registered_profile_count() == before + 1
    assert registered_profile_count() == before

    with profile_serial_lock("lock-g"):
        _hold_in_thread("lock-g", 0.05)
    assert registered_profile_count() == before

    with pytest.raises(ValueError):
        with profile_serial_lock("lock-h", timeout_s="soon"):
            pass
    assert registered_profile_count() == before
