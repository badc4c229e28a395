"""End-to-end tests for the YAML-configured statistics pipeline."""

import json

import pytest
import yaml

from pipeline import Pipeline, step
from processing import compute_stats, load_data, write_summary
from tests.fixtures import (
    create_hashtag,
    create_location,
    create_trip,
    create_trip_days,
    create_trip_type,
    to_frame,
)


@pytest.fixture
def exported_journal(tmp_path):
    """CSV exports of two users' journals."""
    trips = to_frame(
        [
            create_trip("1", "2024-01-10", "2024-01-12", name=None),
            create_trip("2", "2024-03-01", "2024-03-02", user_id="u2"),
        ]
    )
    days = to_frame(
        create_trip_days("1", "2024-01-10", 3)
        + create_trip_days("2", "2024-03-01", 2)
    )
    paths = {
        "trips": tmp_path / "trips.csv",
        "trip_days": tmp_path / "trip_days.csv",
        "trip_locations": tmp_path / "trip_locations.csv",
        "trip_day_hashtags": tmp_path / "trip_day_hashtags.csv",
        "trip_types": tmp_path / "trip_types.parquet",
    }
    trips.write_csv(paths["trips"])
    days.write_csv(paths["trip_days"])
    to_frame([create_location(trip_day_id="1-1")]).write_csv(
        paths["trip_locations"]
    )
    to_frame(
        [create_hashtag("1-1", "food"), create_hashtag("1-2", "food")]
    ).write_csv(paths["trip_day_hashtags"])
    to_frame([create_trip_type("1", "adventure")]).write_parquet(
        paths["trip_types"]
    )
    return {name: str(path) for name, path in paths.items()}


def write_config(tmp_path, input_paths, **compute_params):
    """Write a pipeline config with templated paths."""
    config = {
        "output_dir": str(tmp_path / "out"),
        "steps": [
            {
                "name": "load_data",
                "params": {"input_paths": input_paths, "user_id": "u1"},
                "validate_output": True,
            },
            {"name": "compute_stats", "params": compute_params},
            {
                "name": "write_summary",
                "params": {"output_path": "{{ output_dir }}/summary.json"},
            },
        ],
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


class TestPipelineRun:
    """Tests for running the full pipeline."""

    def test_csv_in_json_out(self, tmp_path, exported_journal):
        """Exports are loaded, summarized and written as camelCase JSON."""
        config_path = write_config(
            tmp_path, exported_journal, today="2024-06-01"
        )
        pipeline = Pipeline(
            config_path, steps=[load_data, compute_stats, write_summary]
        )
        data = pipeline.run()

        # Only the first user's trip was kept
        assert len(data.trips) == 1
        assert data.summary.total_trips == 1

        written = json.loads((tmp_path / "out" / "summary.json").read_text())
        assert written["totalTrips"] == 1
        assert written["totalTravelDays"] == 3
        assert written["mostVisitedLocation"]["city"] == "Lima"
        assert written["hashtagDistribution"][0]["dayCount"] == 2
        assert written["tripTypeDistribution"][0]["trips"] == [
            {"tripId": "1", "tripName": "Untitled trip"}
        ]

    def test_stats_config_params(self, tmp_path, exported_journal):
        """StatsConfig fields are passed through step params."""
        config_path = write_config(
            tmp_path,
            exported_journal,
            today="2024-06-01",
            stats_config={"untitled_trip_name": "Nameless"},
        )
        data = Pipeline(
            config_path, steps=[load_data, compute_stats, write_summary]
        ).run()

        trip = data.summary.trip_trends_year[0].trips[0]
        assert trip.trip_name == "Nameless"

    def test_unknown_step(self, tmp_path, exported_journal):
        """A configured step that was not registered fails."""
        config_path = write_config(tmp_path, exported_journal)
        pipeline = Pipeline(config_path, steps=[load_data])

        with pytest.raises(ValueError, match="compute_stats"):
            pipeline.run()

        # Nothing ran before the missing step was reported
        assert pipeline.data.trips is None


class TestStepArguments:
    """Tests for argument wiring and the step decorator."""

    def test_missing_required_param(self, tmp_path):
        """Required params without config values are reported."""

        @step()
        def needs_path(output_path: str) -> None:
            return None

        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"steps": [{"name": "needs_path"}]}))
        pipeline = Pipeline(path, steps=[needs_path])

        with pytest.raises(ValueError, match="output_path"):
            pipeline.run()

    def test_template_variables(self, tmp_path):
        """Top-level strings replace {{ name }} placeholders."""
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "root": "/data",
                    "steps": [
                        {
                            "name": "s",
                            "params": {"path": "{{ root }}/trips.csv"},
                        }
                    ],
                }
            )
        )
        pipeline = Pipeline(path)
        params = pipeline.config.steps[0].params
        assert params["path"] == "/data/trips.csv"

    def test_unknown_template_left_as_written(self, tmp_path):
        """Placeholders without a matching variable are not replaced."""
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "steps": [
                        {"name": "s", "params": {"path": "{{ nowhere }}/x"}}
                    ]
                }
            )
        )
        params = Pipeline(path).config.steps[0].params
        assert params["path"] == "{{ nowhere }}/x"

    def test_bare_params_key(self, tmp_path):
        """An empty params entry means no params."""
        path = tmp_path / "config.yaml"
        path.write_text("steps:\n  - name: s\n    params:\n")
        assert Pipeline(path).config.steps[0].params == {}

    def test_unsupported_format(self, tmp_path):
        """Unknown file extensions are rejected."""
        with pytest.raises(ValueError, match="Unsupported file format"):
            load_data(input_paths={"trips": str(tmp_path / "trips.xlsx")})

    def test_unknown_table(self, tmp_path):
        """Only journal tables can be loaded."""
        with pytest.raises(ValueError, match="households"):
            load_data(input_paths={"households": str(tmp_path / "h.csv")})
