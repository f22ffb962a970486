from helpers import approve, register


class TestChatFlow:
    def test_register_verify_approve_login_and_chat(self, client, outbox):
        temp_id = register(client, name="Bo", email="bo@x.com", password="pw").json()["userId"]

        refused = client.post("/api/login", json={"email": "bo@x.com", "password": "pw"})
        assert refused.status_code == 401

        user = client.post(
            "/api/verify-otp", json={"userId": temp_id, "enteredOtp": outbox.code_for("bo@x.com")}
        ).json()["user"]
        assert client.post("/api/login", json={"email": "bo@x.com", "password": "pw"}).status_code == 403

        approve(client, user["id"])
        logged_in = client.post("/api/login", json={"email": "bo@x.com", "password": "pw"})
        assert logged_in.status_code == 200

        with client.websocket_connect("/ws") as socket:
            socket.send_text("ping")
            socket.receive_json()

            created = client.post(
                "/api/messages", data={"senderId": user["id"], "senderName": user["name"], "text": "hello all"}
            ).json()["newMessage"]
            assert socket.receive_json() == {"event": "newMessage", "data": created}

            client.put(f"/api/messages/{created['id']}/delete")
            assert socket.receive_json() == {"event": "messageDeleted", "data": created["id"]}

        history = client.get("/api/messages").json()
        assert history[0]["text"] == "[This message was deleted by an admin]"
