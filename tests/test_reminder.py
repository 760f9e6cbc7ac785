"""Tests for the daily reminder job."""
from __future__ import annotations

import json
import random

from conftest import run, set_permission, shown_notifications

from gymtrack.core.config import settings
from gymtrack.core.constants import CHANNEL_ID, PRIORITY_DEFAULT
from gymtrack.domains.device.notifier import LocalNotifier
from gymtrack.domains.device.reminder import (
    DAILY_TIPS,
    JOB_SUCCESS,
    main_entry_intent,
    pick_reminder_message,
    run_reminder_job,
)

KNOWN_TITLES = {"¿Hoy entrenas?", "¿Ya cronometraste tu descanso?", "Consejo del día"}


class TestPickMessage:
    def test_always_from_known_set(self):
        rng = random.Random(7)
        for _ in range(50):
            title, body = pick_reminder_message(rng)
            assert title in KNOWN_TITLES
            if title == "Consejo del día":
                assert body in DAILY_TIPS

    def test_every_message_reachable(self):
        rng = random.Random(1)
        titles = {pick_reminder_message(rng)[0] for _ in range(200)}
        assert titles == KNOWN_TITLES


class TestReminderJob:
    def test_granted_shows_one_with_deep_link(self, session_factory, notifier):
        set_permission(session_factory, True)

        assert run(run_reminder_job(notifier, random.Random(3))) == JOB_SUCCESS

        shown = shown_notifications(session_factory)
        assert len(shown) == 1
        assert shown[0].title in KNOWN_TITLES
        assert shown[0].channel_id == CHANNEL_ID
        assert shown[0].priority == PRIORITY_DEFAULT
        assert shown[0].auto_cancel is True
        intent = json.loads(shown[0].content_intent)
        assert intent == {"target": settings.MAIN_ENTRY_POINT, "flags": ["NEW_TASK", "CLEAR_TASK"]}

    def test_denied_still_succeeds_without_showing(self, session_factory):
        set_permission(session_factory, False)
        notifier = LocalNotifier(session_factory=session_factory, sdk_version=33)

        assert run(run_reminder_job(notifier)) == JOB_SUCCESS
        assert shown_notifications(session_factory) == []

    def test_old_platform_shows_without_permission(self, session_factory):
        notifier = LocalNotifier(session_factory=session_factory, sdk_version=31)
        run(run_reminder_job(notifier))
        assert len(shown_notifications(session_factory)) == 1


def test_intent_clears_task_stack():
    intent = main_entry_intent()
    assert intent.flags == ["NEW_TASK", "CLEAR_TASK"]
    assert intent.target == settings.MAIN_ENTRY_POINT
