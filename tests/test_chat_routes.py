"""Tests for chats, chat messages and the activity feed."""

import pytest


@pytest.fixture
def pair(signup, make_profile):
    alice = signup("alice@campus.edu")
    make_profile(alice[1], skills_have="Photography", skills_to_learn="Python")
    bob = signup("bob@campus.edu")
    make_profile(bob[1], skills_have="Python", skills_to_learn="Guitar")
    return alice, bob


@pytest.fixture
def chat_id(client, pair):
    """Alice asks Bob for help and Bob accepts."""
    alice, bob = pair
    request_id = client.post(
        "/api/mentorship/requests", json={"receiver_id": bob[0], "message": "Help with Python?"}, headers=alice[1]
    ).json()["id"]
    resp = client.put(f"/api/mentorship/requests/{request_id}", json={"decision": "accept"}, headers=bob[1])
    return resp.json()["chat_id"]


class TestMessages:

    def test_send_and_read(self, client, pair, chat_id):
        alice, bob = pair

        resp = client.post(f"/api/chats/{chat_id}/messages", json={"text": "Thanks for accepting!"}, headers=alice[1])
        assert resp.status_code == 201
        assert resp.json()["sender_id"] == alice[0]
        client.post(f"/api/chats/{chat_id}/messages", json={"text": "Happy to help"}, headers=bob[1])

        messages = client.get(f"/api/chats/{chat_id}/messages", headers=bob[1]).json()

        assert [m["text"] for m in messages] == ["Thanks for accepting!", "Happy to help"]
        assert all(m["chat_id"] == chat_id for m in messages)

    def test_limit_keeps_latest_messages(self, client, pair, chat_id):
        alice, _ = pair
        for text in ("m0", "m1", "m2"):
            client.post(f"/api/chats/{chat_id}/messages", json={"text": text}, headers=alice[1])

        messages = client.get(f"/api/chats/{chat_id}/messages", params={"limit": 2}, headers=alice[1]).json()

        assert [m["text"] for m in messages] == ["m1", "m2"]

    def test_chat_preview_updated(self, client, pair, chat_id):
        alice, _ = pair
        client.post(f"/api/chats/{chat_id}/messages", json={"text": "x" * 100}, headers=alice[1])

        chat = client.get("/api/chats", headers=alice[1]).json()[0]

        assert chat["last_message"] == "x" * 80
        assert chat["last_message_at"] is not None

    def test_message_blocked(self, client, pair, chat_id, fake_ai, mongo_db):
        alice, _ = pair
        fake_ai.replies["moderation"] = '{"safe": false, "reason": "Personal attack", "severity": "medium"}'

        resp = client.post(f"/api/chats/{chat_id}/messages", json={"text": "you're an idiot"}, headers=alice[1])

        assert resp.status_code == 422
        assert resp.json()["detail"] == "Message blocked: Personal attack"
        assert mongo_db["messages"].count_documents({}) == 0

    def test_moderation_offline(self, client, pair, chat_id, fake_ai):
        fake_ai.offline.add("moderation")
        resp = client.post(f"/api/chats/{chat_id}/messages", json={"text": "Still there?"}, headers=pair[0][1])
        assert resp.status_code == 201

    def test_empty_message(self, client, pair, chat_id):
        alice, _ = pair
        assert client.post(f"/api/chats/{chat_id}/messages", json={"text": ""}, headers=alice[1]).status_code == 422
        assert client.post(f"/api/chats/{chat_id}/messages", json={"text": "   "}, headers=alice[1]).status_code == 400

    def test_outsider_cannot_see_chat(self, client, chat_id, signup):
        _, carol_headers = signup("carol@campus.edu")

        assert client.get(f"/api/chats/{chat_id}/messages", headers=carol_headers).status_code == 404
        assert client.post(f"/api/chats/{chat_id}/messages", json={"text": "hi"},
                           headers=carol_headers).status_code == 404
        assert client.get("/api/chats", headers=carol_headers).json() == []

    def test_unknown_chat(self, client, pair):
        alice, _ = pair
        assert client.get("/api/chats/not-a-chat/messages", headers=alice[1]).status_code == 404
        assert client.get("/api/chats/5f0000000000000000000000/messages", headers=alice[1]).status_code == 404


class TestActivity:

    def test_activity_feed(self, client, pair, chat_id):
        alice, bob = pair
        client.post("/api/issues", data={
            "category": "Canteen", "description": "Cold food", "is_anonymous": "true"
        }, headers=alice[1])

        body = client.get("/api/activity", headers=alice[1]).json()

        assert body["profile_complete"] is True
        assert len(body["issues"]) == 1
        assert body["issues"][0]["reporter_id"] is None
        assert [r["receiver_id"] for r in body["sent_requests"]] == [bob[0]]
        assert body["received_requests"] == []
        assert [c["id"] for c in body["chats"]] == [chat_id]

    def test_new_user_activity(self, client, signup):
        _, headers = signup("dave@campus.edu")
        body = client.get("/api/activity", headers=headers).json()
        assert body == {
            "profile_complete": False,
            "issues": [],
            "sent_requests": [],
            "received_requests": [],
            "chats": []
        }
