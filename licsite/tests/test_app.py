import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient
from redis import exceptions as redis_exceptions

from licsite.app import create_app
from licsite.cache import InMemoryResponseCache, RedisResponseCache
from licsite.config import Settings
from licsite.db import InMemoryDbClient, ReviewRecord, StoreUnavailable


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UnavailableDbClient(InMemoryDbClient):
    def list_ratings(self):
        raise StoreUnavailable("connection refused")

    def list_feedback(self):
        raise StoreUnavailable("connection refused")


def make_settings(**overrides) -> Settings:
    values = {"use_in_memory_backends": True, "ssr_cache_ttl_seconds": 600}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.clock = FakeClock()
        self.cache = InMemoryResponseCache(ttl_seconds=600, clock=self.clock)
        self.client = TestClient(
            create_app(make_settings(), db_client=self.db, response_cache=self.cache)
        )

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "OK"})

    def test_submit_feedback_and_list(self):
        response = self.client.post(
            "/api/lic/submit-feedback",
            json={"name": "Asha", "email": "asha@example.com", "feedback": "Very helpful"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"message": "Feedback submitted"})

        listed = self.client.get("/api/lic/feedbacks").json()
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0]["name"], "Asha")
        self.assertEqual(listed[0]["email"], "asha@example.com")
        self.assertEqual(listed[0]["feedback"], "Very helpful")

    def test_submit_feedback_requires_name_and_feedback(self):
        response = self.client.post("/api/lic/submit-feedback", json={"name": "Asha"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Name and feedback required"})
        self.assertEqual(len(self.db.feedback), 0)

    def test_submit_query_and_list(self):
        response = self.client.post(
            "/api/lic/submit-query", json={"name": "Ravi", "query": "Term plans?"}
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"message": "Query submitted"})

        listed = self.client.get("/api/lic/queries").json()
        self.assertEqual([q["query"] for q in listed], ["Term plans?"])
        self.assertIsNone(listed[0]["email"])

    def test_submit_query_requires_query(self):
        response = self.client.post("/api/lic/submit-query", json={"name": "Ravi"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Name and query required"})

    def test_create_review(self):
        response = self.client.post(
            "/api/lic/reviews", json={"username": "A", "comment": "Great service"}
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["username"], "A")
        self.assertEqual(payload["comment"], "Great service")
        self.assertIn("createdAt", payload)

        listed = self.client.get("/api/lic/reviews").json()
        self.assertEqual([r["id"] for r in listed], [payload["id"]])

    def test_create_review_missing_comment_is_rejected(self):
        response = self.client.post("/api/lic/reviews", json={"username": "A"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Username and comment required"})
        self.assertEqual(len(self.db.reviews), 0)

    def test_rating_upsert(self):
        created = self.client.post("/api/lic/ratings", json={"userId": "u1", "rating": 4})
        self.assertEqual(created.status_code, 201)
        self.assertEqual(created.json()["rating"], 4)

        updated = self.client.post("/api/lic/ratings", json={"userId": "u1", "rating": 5})
        self.assertEqual(updated.status_code, 200)
        self.assertEqual(updated.json()["id"], created.json()["id"])
        self.assertEqual(updated.json()["rating"], 5)

        listed = self.client.get("/api/lic/ratings").json()
        self.assertEqual(len(listed), 1)
        self.assertEqual(listed[0]["userId"], "u1")

    def test_rating_requires_user_and_rating(self):
        response = self.client.post("/api/lic/ratings", json={"userId": "u1"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "User ID and rating required"})

    def test_malformed_body_is_bad_request(self):
        response = self.client.post(
            "/api/lic/ratings", json={"userId": "u1", "rating": "five"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid request body"})

    def test_out_of_range_rating_is_stored(self):
        response = self.client.post("/api/lic/ratings", json={"userId": "u1", "rating": 9})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.db.ratings["u1"].rating, 9)

    def test_form_encoded_feedback_is_accepted(self):
        response = self.client.post(
            "/api/lic/submit-feedback",
            data={"name": "Asha", "email": "", "feedback": "Called back quickly"},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {"message": "Feedback submitted"})
        saved = self.db.list_feedback()[0]
        self.assertEqual(saved.feedback, "Called back quickly")
        self.assertIsNone(saved.email)

    def test_form_encoded_rating_is_coerced(self):
        response = self.client.post("/api/lic/ratings", data={"userId": "u1", "rating": "5"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(self.db.ratings["u1"].rating, 5)

    def test_form_encoded_blank_field_counts_as_missing(self):
        response = self.client.post("/api/lic/reviews", data={"username": "A", "comment": ""})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Username and comment required"})

    def test_unparseable_json_is_bad_request(self):
        response = self.client.post(
            "/api/lic/submit-query",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid request body"})


class HomePageTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.clock = FakeClock()
        self.cache = InMemoryResponseCache(ttl_seconds=600, clock=self.clock)
        self.client = TestClient(
            create_app(make_settings(), db_client=self.db, response_cache=self.cache)
        )

    def test_home_page_headers(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/html"))
        self.assertEqual(
            response.headers["cache-control"],
            "public, max-age=600, s-maxage=600, stale-while-revalidate=600",
        )
        self.assertTrue(response.headers["etag"].startswith('"'))
        self.assertIn("No reviews yet.", response.text)
        self.assertNotIn("rating-display", response.text.split("<body>")[1])

    def test_same_window_returns_identical_page(self):
        self.db.upsert_rating("u1", 5)
        first = self.client.get("/")
        # Written straight to the store, so the cached page is not invalidated.
        self.db.create_review(ReviewRecord(username="Late", comment="Arrived later"))
        self.clock.advance(599)
        second = self.client.get("/")

        self.assertEqual(first.text, second.text)
        self.assertEqual(first.headers["etag"], second.headers["etag"])
        self.assertNotIn("Arrived later", second.text)

    def test_expired_entry_is_recomputed(self):
        first = self.client.get("/")
        self.db.create_review(ReviewRecord(username="Late", comment="Arrived later"))
        self.clock.advance(600)
        second = self.client.get("/")

        self.assertIn("Arrived later", second.text)
        self.assertNotEqual(first.headers["etag"], second.headers["etag"])

    def test_new_review_invalidates_cached_page(self):
        self.client.get("/")
        self.client.post("/api/lic/reviews", json={"username": "Meera", "comment": "Quick claim"})
        response = self.client.get("/")
        self.assertIn("Quick claim", response.text)

    def test_rating_summary_rendered(self):
        for user_id, rating in [("a", 5), ("b", 5), ("c", 4)]:
            self.client.post("/api/lic/ratings", json={"userId": user_id, "rating": rating})
        response = self.client.get("/")
        self.assertIn("★★★★★", response.text)
        self.assertIn("4.7/5 (3 reviews)", response.text)
        self.assertIn('"averageRating": "4.7"', response.text)

    def test_user_content_is_escaped(self):
        self.client.post(
            "/api/lic/reviews",
            json={"username": "<b>eve</b>", "comment": "<script>alert('x')</script>"},
        )
        response = self.client.get("/")
        self.assertNotIn("<script>alert", response.text)
        self.assertIn("&lt;script&gt;alert(&#39;x&#39;)&lt;/script&gt;", response.text)

    def test_render_failure_returns_static_error_page(self):
        with patch("licsite.home.render_home_page", side_effect=RuntimeError("boom")):
            response = self.client.get("/")
        self.assertEqual(response.status_code, 500)
        self.assertIn("An error occurred. Please try again later.", response.text)
        self.assertNotIn("boom", response.text)

    def test_store_outage_degrades_and_is_not_cached(self):
        db = UnavailableDbClient()
        cache = InMemoryResponseCache(ttl_seconds=600, clock=self.clock)
        client = TestClient(create_app(make_settings(), db_client=db, response_cache=cache))

        response = client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("No reviews yet.", response.text)
        self.assertEqual(cache.entries, {})

    def test_store_outage_on_api_is_server_error(self):
        client = TestClient(
            create_app(make_settings(), db_client=UnavailableDbClient(), response_cache=self.cache)
        )
        response = client.get("/api/lic/feedbacks")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Server error"})


class CacheOutageTests(unittest.TestCase):
    def setUp(self):
        client = MagicMock()
        error = redis_exceptions.ConnectionError("Connection refused")
        client.get.side_effect = error
        client.setex.side_effect = error
        client.scan_iter.side_effect = error
        patcher = patch("licsite.cache.redis.Redis.from_url", return_value=client)
        patcher.start()
        self.addCleanup(patcher.stop)

        self.db = InMemoryDbClient()
        cache = RedisResponseCache(url="redis://localhost:6379/0")
        self.client = TestClient(
            create_app(make_settings(), db_client=self.db, response_cache=cache)
        )

    def test_review_is_created_when_cache_is_down(self):
        response = self.client.post(
            "/api/lic/reviews", json={"username": "Meera", "comment": "Quick claim"}
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(self.db.reviews), 1)

    def test_rating_is_saved_when_cache_is_down(self):
        response = self.client.post("/api/lic/ratings", json={"userId": "u1", "rating": 4})
        self.assertEqual(response.status_code, 201)

    def test_home_page_renders_when_cache_is_down(self):
        self.client.post(
            "/api/lic/reviews", json={"username": "Meera", "comment": "Quick claim"}
        )
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Quick claim", response.text)


class SpaFallbackTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        static_dir = Path(self.tmp.name)
        (static_dir / "index.html").write_text("<div id=app></div>", encoding="utf-8")
        (static_dir / "assets").mkdir()
        (static_dir / "assets" / "app.js").write_text("console.log(1)", encoding="utf-8")
        self.client = TestClient(
            create_app(make_settings(static_dir=str(static_dir)), db_client=InMemoryDbClient())
        )

    def test_client_route_serves_shell(self):
        response = self.client.get("/reviews")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "<div id=app></div>")

    def test_existing_asset_is_served(self):
        response = self.client.get("/assets/app.js")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.text, "console.log(1)")

    def test_missing_shell_is_not_found(self):
        client = TestClient(
            create_app(
                make_settings(static_dir=str(Path(self.tmp.name) / "missing")),
                db_client=InMemoryDbClient(),
            )
        )
        self.assertEqual(client.get("/about").status_code, 404)


if __name__ == "__main__":
    unittest.main()
