"""Tests for the HTTP endpoints (no lifespan: scheduler and registrar stay off)."""
from __future__ import annotations

import json
import logging

import pytest
from conftest import FakeMessaging
from fastapi.testclient import TestClient

from gymtrack.core.database import get_db
from gymtrack.domains.auth.schemas import CurrentUser
from gymtrack.domains.auth.token_handler import verify_token
from gymtrack.domains.device.notifier import LocalNotifier
from gymtrack.domains.device.receiver import notification_receiver
from gymtrack.domains.device.service import device_service
from gymtrack.domains.routine.repository import predefined_routine_repository, routine_repository
from gymtrack.domains.routine.router import get_routine_service
from gymtrack.domains.routine.service import RoutineService
from gymtrack.main import app
from gymtrack.middleware import api_area, loggable_body

ANA = CurrentUser(uid="ana")
ADMIN = CurrentUser(uid="boss", is_admin=True)


@pytest.fixture()
def client(session_factory, firestore_client, monkeypatch):
    async def override_db():
        async with session_factory() as db:
            yield db

    service = RoutineService(
        routines=routine_repository(firestore_client),
        predefined=predefined_routine_repository(firestore_client),
    )
    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[verify_token] = lambda: ANA
    app.dependency_overrides[get_routine_service] = lambda: service

    monkeypatch.setattr(notification_receiver, "notifier", LocalNotifier(session_factory=session_factory, sdk_version=34))
    monkeypatch.setattr(device_service, "messaging", FakeMessaging())
    monkeypatch.setattr(device_service, "sdk_version", 34)

    yield TestClient(app)
    app.dependency_overrides.clear()


def _push(client, title="💪 ¡Nueva rutina disponible!", body="Se ha publicado Leg Day"):
    return client.post("/api/push/messages", json={
        "notification": {"title": title, "body": body},
        "data": {"title": title, "body": body},
    })


class TestHealth:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"


class TestPermissionAndPush:
    def test_permission_defaults_to_not_granted(self, client):
        data = client.get("/api/notifications/permission").json()
        assert data["required"] is True
        assert data["granted"] is False
        assert data["can_display"] is False

    def test_old_platform_reports_and_displays_without_permission(self, client, session_factory, monkeypatch):
        monkeypatch.setattr(device_service, "sdk_version", 30)
        monkeypatch.setattr(notification_receiver, "notifier", LocalNotifier(session_factory=session_factory, sdk_version=30))

        data = client.get("/api/notifications/permission").json()
        assert (data["required"], data["granted"], data["can_display"]) == (False, False, True)
        assert _push(client).json()["displayed"] is True

    def test_push_dropped_until_granted(self, client):
        assert _push(client).json()["displayed"] is False

        granted = client.put("/api/notifications/permission", json={"granted": True}).json()
        assert granted["can_display"] is True

        response = _push(client).json()
        assert response["displayed"] is True

        listed = client.get("/api/notifications/").json()
        assert [(n["title"], n["message"]) for n in listed] == [
            ("💪 ¡Nueva rutina disponible!", "Se ha publicado Leg Day"),
        ]
        assert listed[0]["notification_id"] == response["notification_id"]

    def test_read_and_delete(self, client):
        client.put("/api/notifications/permission", json={"granted": True})
        _push(client)
        _push(client, "Otra", "Más")

        assert client.get("/api/notifications/unread-count").json() == {"unread_count": 2}

        first = client.get("/api/notifications/").json()[0]
        assert client.patch(f"/api/notifications/{first['id']}/read").status_code == 200
        assert client.get("/api/notifications/unread-count").json() == {"unread_count": 1}

        assert client.patch("/api/notifications/read-all").json()["marked_count"] == 1

        assert client.delete(f"/api/notifications/{first['id']}").status_code == 200
        assert client.delete(f"/api/notifications/{first['id']}").status_code == 404
        assert client.delete("/api/notifications/delete-all").json()["deleted_count"] == 1

    def test_missing_notification_404(self, client):
        response = client.patch("/api/notifications/999/read")
        assert response.status_code == 404
        assert response.json()["status"] == "fail"

    def test_register_token_subscribes(self, client):
        response = client.post("/api/push/token", json={"fcm_token": "tok-1"})
        assert response.json() == {"status": "success", "subscribed": True}
        assert device_service.messaging.subscriptions == [("tok-1", "nuevas_rutinas")]

    def test_invalid_push_body_is_422(self, client):
        response = client.post("/api/push/messages", json={"data": "not-a-dict"})
        assert response.status_code == 422
        assert response.json()["status"] == "fail"


class TestRoutinesApi:
    def test_create_list_favorite(self, client):
        created = client.post("/api/routines/", json={
            "nombreRutina": "Leg Day",
            "ejercicios": [{"nombre": "Sentadilla", "series": 4, "reps": 10}],
        })
        assert created.status_code == 201
        routine_id = created.json()["id"]

        assert client.put(f"/api/routines/{routine_id}/favorite", json={"favorite": True}).status_code == 200

        favorites = client.get("/api/routines/favorites").json()
        assert [r["nombreRutina"] for r in favorites] == ["Leg Day"]
        assert favorites[0]["esFavorita"] is True

    def test_exercise_edits_by_id(self, client):
        routine_id = client.post("/api/routines/", json={"nombreRutina": "A"}).json()["id"]

        added = client.post(f"/api/routines/{routine_id}/exercises", json={"nombre": "Remo", "peso": 40})
        exercise_id = added.json()["id"]

        updated = client.put(f"/api/routines/{routine_id}/exercises/{exercise_id}", json={"nombre": "Remo", "peso": 45})
        assert updated.status_code == 200

        routine = client.get("/api/routines/").json()[0]
        assert [(e["id"], e["peso"]) for e in routine["ejercicios"]] == [(exercise_id, 45)]

        assert client.delete(f"/api/routines/{routine_id}/exercises/{exercise_id}").status_code == 200
        assert client.delete(f"/api/routines/{routine_id}/exercises/{exercise_id}").status_code == 404

    def test_progress(self, client):
        client.post("/api/routines/", json={
            "nombreRutina": "Leg Day",
            "ejercicios": [{"nombre": "Sentadilla", "grupoMuscular": "Piernas", "series": 4, "peso": 80}],
        })

        assert client.get("/api/routines/progress/exercises").json() == ["Sentadilla"]
        points = client.get("/api/routines/progress/exercises/Sentadilla").json()
        assert [p["weight"] for p in points] == [80]
        assert set(client.get("/api/routines/progress").json()) == {"Sentadilla"}
        assert client.get("/api/routines/progress/muscle-groups").json() == {"Piernas": 4}

    def test_unknown_routine_is_404(self, client):
        assert client.delete("/api/routines/missing").status_code == 404

    def test_predefined_write_needs_admin(self, client):
        response = client.post("/api/predefined-routines/", json={"nombreRutina": "Core"})
        assert response.status_code == 403
        assert client.post("/api/predefined-routines/Core/exercises", json={"nombre": "Plancha"}).status_code == 403

    def test_admin_edits_predefined_exercises(self, client):
        app.dependency_overrides[verify_token] = lambda: ADMIN
        client.post("/api/predefined-routines/", json={"nombreRutina": "Core"})

        added = client.post("/api/predefined-routines/Core/exercises", json={"nombre": "Plancha", "duracion": 60})
        exercise_id = added.json()["id"]
        assert client.put(
            f"/api/predefined-routines/Core/exercises/{exercise_id}", json={"nombre": "Plancha", "duracion": 90}
        ).status_code == 200

        exercises = client.get("/api/predefined-routines/").json()[0]["ejercicios"]
        assert [(e["id"], e["duracion"]) for e in exercises] == [(exercise_id, 90)]

        assert client.delete(f"/api/predefined-routines/Core/exercises/{exercise_id}").status_code == 200
        assert client.delete(f"/api/predefined-routines/Nope/exercises/{exercise_id}").status_code == 404

    def test_admin_publishes_and_user_copies(self, client):
        app.dependency_overrides[verify_token] = lambda: ADMIN
        predefined_id = client.post("/api/predefined-routines/", json={"nombreRutina": "Core"}).json()["id"]

        app.dependency_overrides[verify_token] = lambda: ANA
        assert [r["nombreRutina"] for r in client.get("/api/predefined-routines/").json()] == ["Core"]
        assert client.post(f"/api/predefined-routines/{predefined_id}/copy").status_code == 201
        assert [r["nombreRutina"] for r in client.get("/api/routines/").json()] == ["Core"]

    def test_me(self, client):
        assert client.get("/api/auth/me").json()["uid"] == "ana"


class TestAccessLog:
    def test_area_from_path(self):
        assert api_area("/api/push/messages") == "push"
        assert api_area("/api/notifications/3/read") == "device"
        assert api_area("/api/predefined-routines/Core") == "predefined"
        assert api_area("/api/routines/progress") == "routines"
        assert api_area("/") == "system"

    def test_device_token_is_masked(self):
        assert loggable_body(b'{"fcm_token": "abcdefghijkl"}') == {"fcm_token": "abcdef…"}
        assert loggable_body(b'{"fcm_token": "abc"}') == {"fcm_token": "***"}
        assert loggable_body(b"not json") == "not json"
        assert loggable_body(b"") is None

    def test_rejected_request_logged_with_area(self, client, caplog):
        with caplog.at_level(logging.WARNING, logger="api_monitor"):
            response = client.post("/api/push/token", json={"fcm_token": 12345678901})
        assert response.status_code == 422

        records = [json.loads(r.getMessage()) for r in caplog.records
                   if r.name == "api_monitor" and r.getMessage().startswith("{")]
        assert records[-1]["area"] == "push"
        assert records[-1]["status"] == 422
        assert records[-1]["input"] == {"fcm_token": "123456…"}
