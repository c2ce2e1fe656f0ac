import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from blog_backend import dependencies
from blog_backend.app import create_app
from blog_backend.config import Settings
from blog_backend.db import InMemoryDbClient
from blog_backend.dependencies import get_db_client, get_storage_client
from blog_backend.errors import UpstreamError
from blog_backend.storage import InMemoryStorageClient


def _blog_payload(**overrides):
    payload = {
        "title": "Hello, World!",
        "des": "A first post",
        "banner": "https://example.test/banner.jpeg",
        "tags": ["Python", "FastAPI"],
        "content": {"blocks": [{"type": "paragraph", "data": {"text": "hi"}}]},
        "draft": False,
    }
    payload.update(overrides)
    return payload


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.storage = InMemoryStorageClient()
        app = create_app()
        app.dependency_overrides[get_db_client] = lambda: self.db
        app.dependency_overrides[get_storage_client] = lambda: self.storage
        self.client = TestClient(app)

    def _signup(self, email="alice@example.com", password="Abc123", fullname="Alice Smith"):
        return self.client.post(
            "/signup",
            json={"fullname": fullname, "email": email, "password": password},
        )

    def test_signup_returns_public_fields_only(self):
        response = self._signup()
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(set(payload), {"profile_img", "username", "fullname"})
        self.assertEqual(payload["username"], "alice")
        self.assertEqual(payload["fullname"], "alice smith")
        self.assertTrue(payload["profile_img"].startswith("https://api.dicebear.com/"))

    def test_signup_stores_hash_not_plaintext(self):
        self._signup()
        user = self.db.find_user_by_email("alice@example.com")
        self.assertNotEqual(user.password, "Abc123")
        self.assertTrue(user.password.startswith("$2"))

    def test_signup_validation_errors(self):
        cases = [
            ({"fullname": "Al", "email": "al@example.com", "password": "Abc123"}, "Full name too short"),
            ({"fullname": "Alice", "email": "not-an-email", "password": "Abc123"}, "Invalid email"),
            ({"fullname": "Alice", "email": "al@example.com", "password": "abc123"}, "Weak password"),
            ({}, "Full name too short"),
        ]
        for body, message in cases:
            with self.subTest(body=body):
                response = self.client.post("/signup", json=body)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json(), {"error": message})
        self.assertEqual(self.db.users, {})

    def test_signup_duplicate_email_conflicts(self):
        self.assertEqual(self._signup().status_code, 201)
        response = self._signup(fullname="Somebody Else", password="Xyz789")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json(), {"error": "Email already exists"})

        response = self._signup(email="ALICE@example.com")
        self.assertEqual(response.status_code, 409)

    def test_signup_taken_username_gets_suffix(self):
        self._signup(email="alice@example.com")
        response = self._signup(email="alice@other.org")
        self.assertEqual(response.status_code, 201)
        username = response.json()["username"]
        self.assertTrue(username.startswith("alice"))
        self.assertEqual(len(username), len("alice") + 5)

    def test_signup_short_username_is_rejected(self):
        response = self._signup(email="al@example.com")
        self.assertEqual(response.status_code, 400)
        self.assertIn("Username", response.json()["error"])

    def test_signin(self):
        self._signup()
        response = self.client.post(
            "/signin", json={"email": "alice@example.com", "password": "Abc123"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(set(response.json()), {"profile_img", "username", "fullname"})

    def test_signin_failures(self):
        self._signup()
        unknown = self.client.post(
            "/signin", json={"email": "bob@example.com", "password": "Abc123"}
        )
        self.assertEqual(unknown.status_code, 403)
        self.assertEqual(
            unknown.json(), {"error": "Email not found please enter the valid email"}
        )

        wrong = self.client.post(
            "/signin", json={"email": "alice@example.com", "password": "Abc124"}
        )
        self.assertEqual(wrong.status_code, 403)
        self.assertEqual(wrong.json(), {"error": "Incorrect password"})

    def test_get_upload_url(self):
        response = self.client.get("/get-upload-url")
        self.assertEqual(response.status_code, 200)
        url = response.json()["uploadURL"]
        self.assertIn(".jpeg", url)
        self.assertIn("expires=600", url)
        self.assertIn("content_type=image/jpeg", url)

    def test_get_upload_url_storage_failure(self):
        class BrokenStorage:
            def presign_put(self, path, expires_in=600, content_type="image/jpeg"):
                raise UpstreamError("boom")

        self.client.app.dependency_overrides[get_storage_client] = BrokenStorage
        response = self.client.get("/get-upload-url")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to generate upload URL"})

    def test_create_blog(self):
        response = self.client.post("/create-blog", json=_blog_payload())
        self.assertEqual(response.status_code, 200)
        blog_id = response.json()["id"]
        self.assertTrue(blog_id.startswith("Hello-World-"))
        stored = self.db.blogs[blog_id]
        self.assertEqual(stored.tags, ["python", "fastapi"])
        self.assertIsNone(stored.author_id)

    def test_create_blog_validation_is_forbidden(self):
        cases = [
            (_blog_payload(title=""), "Title required"),
            (_blog_payload(des="x" * 201), "Description max 200 chars"),
            (_blog_payload(banner=None), "Banner required"),
            (_blog_payload(content={"blocks": []}), "Content required"),
            (_blog_payload(tags=[f"t{i}" for i in range(11)]), "Tags required (max 10)"),
        ]
        for body, message in cases:
            with self.subTest(message=message):
                response = self.client.post("/create-blog", json=body)
                self.assertEqual(response.status_code, 403)
                self.assertEqual(response.json(), {"error": message})
        self.assertEqual(self.db.blogs, {})

    def test_create_blog_with_ten_tags(self):
        body = _blog_payload(tags=[f"t{i}" for i in range(10)])
        response = self.client.post("/create-blog", json=body)
        self.assertEqual(response.status_code, 200)

    def test_malformed_signup_body_is_bad_request(self):
        response = self.client.post(
            "/signup",
            json={"fullname": 123, "email": "alice@example.com", "password": "Abc123"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid fullname"})

    def test_create_blog_wrong_types_are_forbidden(self):
        cases = [
            (_blog_payload(title=123), "Title required"),
            (_blog_payload(des=["d"]), "Description max 200 chars"),
            (_blog_payload(tags="python"), "Tags required (max 10)"),
            (_blog_payload(tags=[1, 2]), "Tags required (max 10)"),
            ([_blog_payload()], "Invalid request body"),
        ]
        for body, message in cases:
            with self.subTest(message=message, body=body):
                response = self.client.post("/create-blog", json=body)
                self.assertEqual(response.status_code, 403)
                self.assertEqual(response.json(), {"error": message})
        self.assertEqual(self.db.blogs, {})

    def test_signup_rejects_non_ascii_digit_password(self):
        # 20 characters but 74 bytes once encoded
        password = "Aa" + "\U0001D7CF" * 18
        response = self._signup(password=password)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Weak password"})
        self.assertEqual(self.db.users, {})

    @patch("blog_backend.credentials.bcrypt.hashpw", side_effect=ValueError("too long"))
    def test_signup_hash_rejection_is_validation_error(self, mock_hashpw):
        response = self._signup()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Weak password"})
        self.assertEqual(self.db.users, {})

    def test_latest_blogs(self):
        for i in range(7):
            self.client.post("/create-blog", json=_blog_payload(title=f"Post {i}"))
        self.client.post("/create-blog", json=_blog_payload(title="Hidden", draft=True))

        response = self.client.get("/latest-blogs")
        self.assertEqual(response.status_code, 200)
        blogs = response.json()["blogs"]
        self.assertEqual(len(blogs), 5)
        self.assertEqual([b["title"] for b in blogs], [f"Post {i}" for i in range(6, 1, -1)])
        self.assertEqual(
            set(blogs[0]),
            {"blog_id", "title", "des", "tags", "banner", "activity", "publishedAt", "author"},
        )
        self.assertIsNone(blogs[0]["author"])

    def test_unknown_route_uses_error_field(self):
        response = self.client.get("/nope")
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())


class BackendFailureTests(unittest.TestCase):
    def setUp(self):
        dependencies._db_client = None
        self.app = create_app()
        self.app.dependency_overrides[get_storage_client] = InMemoryStorageClient
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def tearDown(self):
        dependencies._db_client = None

    @patch("blog_backend.dependencies.get_settings")
    def test_unreachable_database_renders_json(self, mock_settings):
        mock_settings.return_value = Settings(
            database_url="sqlite+pysqlite:////nonexistent/dir/blog.db",
            use_in_memory_backends=False,
        )
        response = self.client.post(
            "/signin", json={"email": "alice@example.com", "password": "Abc123"}
        )
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})
        self.assertIsNone(dependencies._db_client)

    def test_unexpected_error_renders_json(self):
        def broken_db():
            raise RuntimeError("boom")

        self.app.dependency_overrides[get_db_client] = broken_db
        response = self.client.get("/latest-blogs")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Internal server error"})
        self.assertNotIn("boom", response.text)


if __name__ == "__main__":
    unittest.main()
