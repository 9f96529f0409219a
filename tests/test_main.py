import unittest

from fastapi.testclient import TestClient

from weather_planner.main import app


class TestMain(unittest.TestCase):
    def test_app_metadata(self):
        self.assertEqual(app.title, "Weather-Aware Planner")

    def test_health(self):
        resp = TestClient(app).get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_api_routes_are_versioned(self):
        paths = {route.path for route in app.routes}
        self.assertIn("/v1/planner", paths)
        self.assertIn("/v1/tasks/{task_id}/reschedule", paths)


if __name__ == "__main__":
    unittest.main()
