import datetime as dt
import unittest

from weather_planner.domain import (
    Coordinates,
    ForecastSeries,
    InvalidTaskError,
    Role,
    TaskStatus,
    parse_task,
)


def _raw(**kwargs):
    data = {"title": "Inspect pump", "date": "2025-06-10", "city": "Seattle", "durationHours": 2}
    data.update(kwargs)
    return data


class TestParseTask(unittest.TestCase):
    def test_defaults(self):
        task = parse_task(_raw())
        self.assertEqual(task.id, "tmp")
        self.assertEqual(task.role, Role.TECHNICIAN)
        self.assertEqual(task.status, TaskStatus.TODO)
        self.assertEqual(task.duration_hours, 2.0)

    def test_explicit_id_wins(self):
        self.assertEqual(parse_task(_raw(id="x"), task_id="y").id, "y")

    def test_timestamps_are_reduced_to_dates(self):
        self.assertEqual(parse_task(_raw(date="2025-06-10T23:30:00Z")).date, dt.date(2025, 6, 10))
        self.assertEqual(parse_task(_raw(date=dt.datetime(2025, 6, 11, 8, 0))).date, dt.date(2025, 6, 11))

    def test_unknown_status_is_coerced(self):
        self.assertEqual(parse_task(_raw(status="Blocked")).status, TaskStatus.TODO)
        self.assertEqual(parse_task(_raw(status="Done")).status, TaskStatus.DONE)

    def test_blank_optional_text_becomes_none(self):
        task = parse_task(_raw(description="  ", notes=" check valve "))
        self.assertIsNone(task.description)
        self.assertEqual(task.notes, "check valve")

    def test_snake_case_input_is_accepted(self):
        data = _raw()
        data["duration_hours"] = data.pop("durationHours")
        self.assertEqual(parse_task(data).duration_hours, 2.0)

    def test_malformed_input_raises(self):
        bad_inputs = [
            _raw(title="  "),
            _raw(city=""),
            _raw(date="not-a-date"),
            _raw(durationHours=-1),
            _raw(durationHours="lots"),
            _raw(durationHours=float("nan")),
            _raw(role="intern"),
            {"title": "No date", "city": "Seattle", "durationHours": 1},
        ]
        for raw in bad_inputs:
            with self.subTest(raw=raw):
                with self.assertRaises(InvalidTaskError):
                    parse_task(raw)

    def test_invalid_task_error_is_value_error(self):
        self.assertTrue(issubclass(InvalidTaskError, ValueError))


class TestForecastSeries(unittest.TestCase):
    def test_unequal_lengths_rejected(self):
        with self.assertRaises(ValueError):
            ForecastSeries(dates=["2025-06-09"], precip=[], wind=[1.0], temp=[1.0])

    def test_from_dict(self):
        series = ForecastSeries.from_dict({"dates": ["2025-06-09"], "precip": [10], "wind": [1.0], "temp": [2.0]})
        self.assertEqual(len(series), 1)
        self.assertEqual(series.precip, (10,))

    def test_coordinates_from_dict(self):
        self.assertEqual(Coordinates.from_dict({"lat": "1.5", "lon": 2}), Coordinates(1.5, 2.0))


if __name__ == "__main__":
    unittest.main()
