import unittest

from fastapi.testclient import TestClient

from virtual_marlin import SimulatorConfig, VirtualExecutor
from virtual_marlin.interface.http_debug_server import DebugHTTPServer


class TestDebugHTTPServer(unittest.TestCase):
    def setUp(self):
        config = SimulatorConfig(
            latency_ms=0,
            open_delay_ms=0,
            command_timeout_s=1.0,
            responses={"G29": "echo:busy: processing"},
        )
        self.executor = VirtualExecutor(config)
        self.debug_server = DebugHTTPServer(self.executor)
        # Entering the client keeps one event loop alive across requests,
        # which the connection's worker task needs.
        self.client = TestClient(self.debug_server.app)
        self.client.__enter__()

    def tearDown(self):
        if self.executor.is_open:
            self.client.post("/close")
        self.client.__exit__(None, None, None)

    def test_root_endpoint(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["name"], "Virtual Marlin Debug API")
        self.assertIn("/command", data["endpoints"])

    def test_health_endpoint(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy", "executor_open": False})

    def test_status_when_closed(self):
        response = self.client.get("/status")
        self.assertEqual(response.json(), {"state": "closed", "commands_processed": None, "busy": False})

    def test_open_and_close(self):
        response = self.client.post("/open")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "open")
        self.assertEqual(response.json()["commands_processed"], 0)

        response = self.client.post("/close")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["state"], "closed")
        self.assertIsNone(response.json()["commands_processed"])

    def test_open_twice_conflicts(self):
        self.client.post("/open")
        response = self.client.post("/open")
        self.assertEqual(response.status_code, 409)

    def test_close_when_closed_conflicts(self):
        response = self.client.post("/close")
        self.assertEqual(response.status_code, 409)

    def test_command_when_closed_conflicts(self):
        response = self.client.post("/command", json={"command": "G28"})
        self.assertEqual(response.status_code, 409)

    def test_command_round_trip(self):
        self.client.post("/open")
        response = self.client.post("/command", json={"command": "M105"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["command"], "M105")
        self.assertTrue(data["reply"].startswith("ok T:20.0"))
        self.assertTrue(data["complete"])
        self.assertEqual(data["commands_processed"], 1)

    def test_command_without_ok_times_out(self):
        self.client.post("/open")
        response = self.client.post("/command", json={"command": "G29", "timeout": 0.05})
        self.assertEqual(response.status_code, 504)
        self.assertIn("Timeout", response.json()["detail"])
        self.assertEqual(self.client.get("/status").json()["commands_processed"], 1)

    def test_blank_command_is_rejected(self):
        self.client.post("/open")
        for command in ("", "   ", "; just a comment"):
            response = self.client.post("/command", json={"command": command, "timeout": 5.0})
            self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/status").json()["commands_processed"], 0)

    def test_command_validation_error(self):
        response = self.client.post("/command", json={"timeout": 1})
        self.assertEqual(response.status_code, 422)

    def test_validate_endpoint(self):
        response = self.client.post("/validate", json={"reply": "T:20.0\r\nok\r\n"})
        self.assertEqual(response.json()["complete"], True)
        response = self.client.post("/validate", json={"reply": ""})
        self.assertEqual(response.json()["complete"], False)


if __name__ == "__main__":
    unittest.main()
