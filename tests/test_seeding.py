import unittest
from unittest.mock import MagicMock

import requests

from connector import SeedClient, SeedClientError, load_rows, seed_session
from records import ClinicSession


def _response(payload=None, *, status: int = 200, json_error: bool = False) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    response.text = "error body"
    if json_error:
        response.json.side_effect = ValueError("bad json")
    else:
        response.json.return_value = payload
    return response


class SeedClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.http = MagicMock(spec=requests.Session)
        self.client = SeedClient("https://seed.example.com/", session=self.http)

    def test_fetch_collection_reads_named_key(self) -> None:
        self.http.get.return_value = _response({"patients": [{"name": "Ana"}, "junk"]})

        rows = self.client.fetch_collection("patients")

        self.assertEqual(rows, [{"name": "Ana"}])
        url = self.http.get.call_args[0][0]
        self.assertEqual(url, "https://seed.example.com/patients")

    def test_missing_key_yields_no_rows(self) -> None:
        self.http.get.return_value = _response({"other": []})

        self.assertEqual(self.client.fetch_collection("patients"), [])

    def test_http_error_status_raises(self) -> None:
        self.http.get.return_value = _response(status=500)

        with self.assertRaises(SeedClientError):
            self.client.fetch_collection("patients")

    def test_network_error_raises(self) -> None:
        self.http.get.side_effect = requests.ConnectionError("down")

        with self.assertRaises(SeedClientError):
            self.client.fetch_collection("patients")

    def test_invalid_json_raises(self) -> None:
        self.http.get.return_value = _response(json_error=True)

        with self.assertRaises(SeedClientError):
            self.client.fetch_collection("patients")

    def test_close_releases_session(self) -> None:
        with self.client:
            pass

        self.http.close.assert_called_once()


class SeedSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = ClinicSession()

    def test_failed_collection_stays_empty(self) -> None:
        client = MagicMock(spec=SeedClient)
        client.fetch_collection.side_effect = SeedClientError("offline")

        summary = seed_session(self.session, client, ["patients"])

        self.assertEqual(summary, {"patients": 0})
        self.assertEqual(len(self.session.patients), 0)

    def test_rows_are_loaded_with_their_ids(self) -> None:
        client = MagicMock(spec=SeedClient)
        client.fetch_collection.return_value = [
            {"id": 3, "name": "Ana", "age": 40, "gender": "Female", "condition": "Asthma"},
            {"name": "Ben", "age": "35", "gender": "Male", "condition": "Flu"},
        ]

        summary = seed_session(self.session, client, ["patients"])

        self.assertEqual(summary, {"patients": 2})
        ids = [patient.id for patient in self.session.patients.list()]
        self.assertEqual(ids, [3, 4])

    def test_bad_and_conflicting_rows_are_skipped(self) -> None:
        rows = [
            {"id": 1, "date": "2024-01-01", "time": "09:00", "patient": "P1", "provider": "Dr. A"},
            {"id": 2, "date": "2024-01-01", "time": "09:00", "patient": "P2", "provider": "Dr. A"},
            {"id": 1, "date": "2024-01-01", "time": "10:00", "patient": "P3", "provider": "Dr. A"},
            {"id": 4, "date": "not a date", "time": "10:00", "patient": "P4", "provider": "Dr. A"},
            {"id": 5, "startTime": "2024-01-01T11:00", "patient": "P5", "provider": "Dr. A"},
        ]

        loaded = load_rows(self.session, "appointments", rows)

        self.assertEqual(loaded, 2)
        patients = [record.patient for record in self.session.appointments.list()]
        self.assertEqual(patients, ["P1", "P5"])


if __name__ == "__main__":
    unittest.main()
