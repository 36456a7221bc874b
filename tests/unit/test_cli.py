"""
Tests for the resumerank command line interface.
"""

import asyncio

import pytest
from typer.testing import CliRunner

from resumerank.cli import app
from resumerank.data import database
from resumerank.data.models import ActivityLogEntry
from resumerank.data.repositories import ActivityLogRepository

runner = CliRunner()


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "ResumeRank Configuration" in result.output

    def test_bulk_analyze_rejects_too_many_ids(self):
        ids = [f"c{i}" for i in range(51)]
        result = runner.invoke(app, ["bulk-analyze", *ids, "--user", "u1"])
        assert result.exit_code == 2
        assert "Maximum 50 candidates" in result.output

    def test_analyze_requires_user(self):
        result = runner.invoke(app, ["analyze", "c1"])
        assert result.exit_code != 0


class TestActivityCommand:
    @pytest.fixture
    def db(self, fake_db, monkeypatch):
        repository = ActivityLogRepository(fake_db)
        for resource_id, action, score in [
            ("c1", "AI_ANALYSIS_COMPLETED", 85),
            ("c2", "AI_REANALYSIS_COMPLETED", 72.5),
        ]:
            entry = ActivityLogEntry(
                user_id="u1",
                action=action,
                resource_type="candidate",
                resource_id=resource_id,
                metadata={"score": score},
            )
            asyncio.run(repository.append_async(entry))
        monkeypatch.setattr(database, "get_database_manager", lambda: fake_db)
        return fake_db

    def test_candidate_history(self, db):
        result = runner.invoke(app, ["activity", "--candidate", "c1"])
        assert result.exit_code == 0
        assert "Analysis Activity" in result.output
        assert "85" in result.output
        assert "72.5" not in result.output
        assert db.closed

    def test_user_activity_filtered_by_action(self, db):
        result = runner.invoke(
            app, ["activity", "--user", "u1", "--action", "AI_REANALYSIS_COMPLETED"]
        )
        assert result.exit_code == 0
        assert "72.5" in result.output
        assert "85" not in result.output

    def test_nothing_recorded(self, db):
        result = runner.invoke(app, ["activity", "--user", "nobody"])
        assert result.exit_code == 0
        assert "No activity recorded" in result.output

    def test_requires_candidate_or_user(self):
        result = runner.invoke(app, ["activity"])
        assert result.exit_code == 2
        assert "--candidate or --user" in result.output
