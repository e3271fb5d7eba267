from unittest import mock

from fintech_index.models import Role, User

PKG = "fintech_index.routers.users.{}"


class TestAdminOnly():
    def test_list_users_requires_admin(self, client, viewer_headers):
        assert client.get("/api/users", headers=viewer_headers).status_code == 403

    def test_list_users_requires_token(self, client):
        assert client.get("/api/users").status_code == 401

    def test_list_users(self, client, admin_headers, make_user):
        make_user(email="pending@example.com", verified=False)
        response = client.get("/api/users", headers=admin_headers)
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()}
        assert emails == {"admin@example.com", "pending@example.com"}

    def test_list_unverified(self, client, admin_headers, make_user):
        make_user(email="pending@example.com", verified=False)
        make_user(email="ok@example.com")
        response = client.get("/api/users/unverified", headers=admin_headers)
        assert [u["email"] for u in response.json()] == ["pending@example.com"]


class TestVerify():
    @mock.patch(PKG.format("send_verification_notice"), return_value=True)
    def test_verify_user(self, mocked_notice, client, db, admin_headers, make_user):
        pending = make_user(email="pending@example.com", verified=False)
        response = client.patch(f"/api/users/{pending.id}/verify", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["user"]["isVerified"] is True
        mocked_notice.assert_called_once_with("pending@example.com")

        db.expire_all()
        assert db.get(User, pending.id).is_verified is True

    @mock.patch(PKG.format("send_verification_notice"), return_value=False)
    def test_verify_succeeds_when_mail_fails(self, mocked_notice, client, admin_headers, make_user):
        pending = make_user(email="pending@example.com", verified=False)
        response = client.patch(f"/api/users/{pending.id}/verify", headers=admin_headers)
        assert response.status_code == 200
        assert mocked_notice.called

    def test_verify_unknown_user(self, client, admin_headers):
        assert client.patch("/api/users/999/verify", headers=admin_headers).status_code == 404

    def test_verified_user_can_login(self, client, admin_headers, make_user):
        pending = make_user(email="pending@example.com", verified=False)
        with mock.patch(PKG.format("send_verification_notice")):
            client.patch(f"/api/users/{pending.id}/verify", headers=admin_headers)
        response = client.post("/api/auth/login",
                               json={"email": "pending@example.com", "password": "secret123"})
        assert response.status_code == 200


class TestUpdateDelete():
    def test_update_role_and_name(self, client, admin_headers, make_user):
        user = make_user(email="someone@example.com")
        response = client.patch(f"/api/users/{user.id}", headers=admin_headers,
                                json={"role": "editor", "name": "  Renamed "})
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "editor"
        assert response.json()["user"]["name"] == "Renamed"

    def test_update_invalid_role(self, client, admin_headers, make_user):
        user = make_user(email="someone@example.com")
        response = client.patch(f"/api/users/{user.id}", headers=admin_headers,
                                json={"role": "owner"})
        assert response.status_code == 400

    def test_delete_user(self, client, db, admin_headers, make_user):
        user = make_user(email="someone@example.com")
        response = client.delete(f"/api/users/{user.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "someone@example.com"
        db.expire_all()
        assert db.get(User, user.id) is None

    def test_delete_unknown_user(self, client, admin_headers):
        assert client.delete("/api/users/999", headers=admin_headers).status_code == 404


def test_me_is_not_treated_as_an_id(client, make_user, headers_for):
    editor = make_user(email="editor@example.com", role=Role.EDITOR)
    response = client.get("/api/users/me", headers=headers_for(editor))
    assert response.status_code == 200
    assert response.json()["id"] == editor.id


class TestMailer():
    def test_unconfigured_smtp_returns_false(self):
        from fintech_index.mailer import send_email
        assert send_email("x@example.com", "subject", "body") is False

    @mock.patch("fintech_index.mailer.smtplib.SMTP")
    def test_starttls_send(self, mocked_smtp):
        from fintech_index import mailer
        with mock.patch.object(mailer.config, "SMTP_HOST", "smtp.example.com"), \
             mock.patch.object(mailer.config, "SMTP_PORT", 587), \
             mock.patch.object(mailer.config, "SMTP_USER", "bot@example.com"), \
             mock.patch.object(mailer.config, "SMTP_PASS", "pw"):
            assert mailer.send_verification_notice("x@example.com") is True
        server = mocked_smtp.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot@example.com", "pw")
        sent = server.send_message.call_args[0][0]
        assert sent["To"] == "x@example.com"

    @mock.patch("fintech_index.mailer.smtplib.SMTP", side_effect=OSError("refused"))
    def test_connection_failure_returns_false(self, mocked_smtp):
        from fintech_index import mailer
        with mock.patch.object(mailer.config, "SMTP_HOST", "smtp.example.com"):
            assert mailer.send_email("x@example.com", "s", "b") is False
