"""HTTP tests for /auth, /files, /users, /wines, /health and error translation."""
import uuid

from fastapi.testclient import TestClient

from winereview.database.models import Comment, Review, User
from winereview.services.identity import ExternalIdentity

PNG_2KB = b"\x89PNG\r\n\x1a\n" + b"\x00" * 2040


class TestAuth:
    def test_google_sign_in(self, client, identity_provider, tokens, row_count):
        identity_provider.register("google-token", ExternalIdentity(
            provider_id="g-1", email="ana@example.com", display_name="Ana",
        ))

        response = client.post("/auth/google", json={"googleIdToken": "google-token"})

        assert response.status_code == 200
        body = response.json()
        assert body["email"] == "ana@example.com"
        assert "avatarUrl" not in body
        assert tokens.decode(body["token"]) == uuid.UUID(body["userId"])
        assert row_count(User) == 1

    def test_session_from_sign_in_opens_protected_routes(self, client, identity_provider):
        identity_provider.register("google-token", ExternalIdentity(provider_id="g-1", email="ana@example.com"))
        token = client.post("/auth/google", json={"googleIdToken": "google-token"}).json()["token"]

        response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["displayName"] == "ana"

    def test_invalid_google_token_is_401(self, client, row_count):
        response = client.post("/auth/google", json={"googleIdToken": "forged"})

        assert response.status_code == 401
        assert response.json()["error"] == "authentication_failed"
        assert row_count(User) == 0

    def test_blank_google_token_is_400(self, client, identity_provider):
        assert client.post("/auth/google", json={"googleIdToken": "  "}).status_code == 400
        assert client.post("/auth/google", json={}).status_code == 400
        assert identity_provider.calls == []

    def test_email_login(self, client, make_user):
        user = make_user(email="dev@winereviewer.local", display_name="Dev Sommelier")

        response = client.post("/auth/login", json={"email": "dev@winereviewer.local"})

        assert response.status_code == 200
        assert response.json()["userId"] == str(user.id)

    def test_email_login_for_unknown_user_is_500(self, client):
        response = client.post("/auth/login", json={"email": "nobody@example.com"})

        assert response.status_code == 500
        assert response.json()["error"] == "user_not_found"

    def test_email_login_bad_email_is_400(self, client):
        assert client.post("/auth/login", json={"email": "nope"}).status_code == 400

    def test_email_login_is_not_mounted_when_disabled(self, monkeypatch):
        from winereview.api.main import create_app
        from winereview.core.config import get_settings

        monkeypatch.setenv("ENABLE_EMAIL_LOGIN", "false")
        get_settings.cache_clear()
        try:
            app = create_app(get_settings())
        finally:
            get_settings.cache_clear()

        response = TestClient(app).post("/auth/login", json={"email": "dev@winereviewer.local"})
        assert response.status_code in (404, 405)


class TestFiles:
    def test_upload_png(self, client, storage):
        response = client.post("/files/upload", files={"file": ("glass.png", PNG_2KB, "image/png")})

        assert response.status_code == 200
        body = response.json()
        assert body["fileName"] == "glass.png"
        assert body["fileSizeBytes"] == 2048
        assert body["contentType"] == "image/png"
        assert body["fileUrl"].endswith(body["bucketKey"])
        assert len(storage.puts) == 1

    def test_empty_file_is_400(self, client, storage):
        response = client.post("/files/upload", files={"file": ("empty.png", b"", "image/png")})

        assert response.status_code == 400
        assert "empty" in response.json()["message"]
        assert storage.puts == []

    def test_oversized_file_is_400(self, client, storage):
        data = b"\x00" * (11 * 1024 * 1024)
        response = client.post("/files/upload", files={"file": ("big.jpg", data, "image/jpeg")})

        assert response.status_code == 400
        assert "maximum size" in response.json()["message"]
        assert storage.puts == []

    def test_pdf_is_400(self, client, storage):
        response = client.post("/files/upload", files={"file": ("label.pdf", b"%PDF-1.7", "application/pdf")})

        assert response.status_code == 400
        assert "application/pdf" in response.json()["message"]
        assert storage.puts == []

    def test_missing_file_part_is_400(self, client):
        response = client.post("/files/upload", files={"other": ("x.png", PNG_2KB, "image/png")})

        assert response.status_code == 400
        assert "file" in response.json()["message"]

    def test_storage_failure_is_502(self, client, storage):
        storage.fail = True

        response = client.post("/files/upload", files={"file": ("glass.png", PNG_2KB, "image/png")})

        assert response.status_code == 502
        assert response.json()["error"] == "storage_error"


class TestUsers:
    def test_profile(self, client, make_user, make_wine, make_review, auth_headers):
        me = make_user(email="ana@example.com", display_name="Ana")
        make_review(me, make_wine())

        body = client.get("/users/me", headers=auth_headers(me.id)).json()

        assert body["email"] == "ana@example.com"
        assert body["reviewCount"] == 1
        assert body["commentCount"] == 0

    def test_profile_requires_session(self, client):
        assert client.get("/users/me").status_code == 403

    def test_delete_account(self, client, make_user, make_wine, make_review, make_comment, auth_headers, row_count):
        me, other = make_user(), make_user()
        mine = make_review(me, make_wine())
        make_comment(mine, other)
        make_comment(make_review(other, make_wine("Rioja")), me)
        headers = auth_headers(me.id)

        assert client.delete("/users/me", headers=headers).status_code == 204

        assert row_count(User) == 1
        assert row_count(Review) == 1
        assert row_count(Comment) == 0
        # The old session no longer resolves to a user
        assert client.get("/users/me", headers=headers).status_code == 403


class TestWines:
    def test_browse_and_read(self, client, make_user, make_wine, make_review):
        barolo = make_wine("Barolo", country="Italy", grape="Nebbiolo", year=2016)
        make_wine("Rioja", country="Spain")
        make_review(make_user(), barolo, rating=4)

        page = client.get("/wines", params={"country": "italy"}).json()
        wine = client.get(f"/wines/{barolo.id}").json()

        assert [w["name"] for w in page["content"]] == ["Barolo"]
        assert wine["grape"] == "Nebbiolo"
        assert wine["averageRating"] == 4.0
        assert wine["reviewCount"] == 1

    def test_unreviewed_wine_has_no_average(self, client, make_wine):
        body = client.get(f"/wines/{make_wine().id}").json()

        assert "averageRating" not in body
        assert body["reviewCount"] == 0

    def test_missing_wine_is_404(self, client):
        assert client.get(f"/wines/{uuid.uuid4()}").status_code == 404

    def test_sort_by_year(self, client, make_wine):
        for year in (2019, 2010, 2015):
            make_wine(f"Wine {year}", year=year)

        body = client.get("/wines", params={"sort": "year,desc"}).json()

        assert [w["year"] for w in body["content"]] == [2019, 2015, 2010]


class TestHealthAndHeaders:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_when_database_is_up(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    def test_not_ready_when_database_is_down(self, app, client):
        from winereview.api import dependencies

        class DownDatabase:
            def check_connection(self):
                return False

        app.dependency_overrides[dependencies.get_database] = lambda: DownDatabase()

        response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.json()["status"] == "unavailable"

    def test_security_and_request_id_headers(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Request-ID"] == "abc123"

    def test_malformed_request_id_is_replaced(self, client):
        for bad in ("x" * 65, "<script>", "id with spaces"):
            response = client.get("/health", headers={"X-Request-ID": bad})

            assert response.headers["X-Request-ID"] != bad
            assert len(response.headers["X-Request-ID"]) == 12

    def test_request_id_with_trailing_newline_is_replaced(self):
        from winereview.core.audit import resolve_request_id

        assert resolve_request_id("abc-123") == "abc-123"
        assert resolve_request_id("abc-123\n") != "abc-123\n"
        assert len(resolve_request_id(None)) == 12

    def test_auth_responses_are_not_cached(self, client):
        response = client.post("/auth/google", json={"googleIdToken": "forged"})
        assert response.headers["Cache-Control"] == "no-store"

    def test_error_body_shape(self, client):
        body = client.get(f"/reviews/{uuid.uuid4()}").json()

        assert set(body) == {"error", "message", "details", "timestamp"}
        assert body["message"].startswith("Review not found: ")
