"""Tests for CLI main module."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from harmony_discover.cli.main import cli, load_engine


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestCli:
    """Tests for main CLI group."""

    def test_cli_help(self, runner: CliRunner) -> None:
        """Test CLI shows help."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Harmony Discover" in result.output

    def test_cli_version(self, runner: CliRunner) -> None:
        """Test CLI shows version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "harmony-discover" in result.output

    def test_missing_catalog_fails(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--catalog", str(tmp_path / "missing.json"), "stats"])

        assert result.exit_code == 1
        assert "cannot read catalog" in result.output


class TestLoadEngine:
    """Tests for load_engine helper."""

    def test_loads_catalog(self, catalog_file: Path) -> None:
        engine = load_engine(str(catalog_file))

        assert len(engine.catalog) == 7
        assert len(engine.profiles) == 0

    def test_replays_events_skipping_unknown_tracks(self, catalog_file: Path, events_file: Path) -> None:
        engine = load_engine(str(catalog_file), str(events_file))

        u2 = engine.profiles.get("u2")
        assert u2 is not None
        assert u2.play_counts == {"t2": 1, "t6": 2}
        assert engine.profiles.user_ids() == ["u1", "u2"]


class TestRecommendCommand:
    """Tests for recommend command."""

    def test_recommend_for_user(self, runner: CliRunner, catalog_file: Path, events_file: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "--catalog",
                str(catalog_file),
                "--events",
                str(events_file),
                "recommend",
                "--user",
                "u1",
                "--track",
                "t1",
                "--mood",
                "energetic",
                "--limit",
                "3",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "Recommendations" in result.output
        assert "t7" in result.output
        assert "t6" in result.output
        assert "t4" not in result.output

    def test_recommend_with_explanations(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "recommend", "--mood", "sad", "--explain"])

        assert result.exit_code == 0, result.output
        assert "Recommended because" in result.output

    def test_nothing_to_recommend(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text('{"tracks": [{"id": "a", "title": "A", "artist": "X", "genre": "Folk"}]}')

        result = runner.invoke(cli, ["-c", str(path), "recommend"])

        assert result.exit_code == 0
        assert "No recommendations" in result.output

    def test_unknown_track(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "recommend", "--track", "nope"])

        assert result.exit_code == 1
        assert "Track not found" in result.output

    def test_invalid_mood(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "recommend", "--mood", "grumpy"])
        assert result.exit_code == 2


class TestSimilarCommand:
    """Tests for similar command."""

    def test_similar(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "similar", "t1", "--limit", "2"])

        assert result.exit_code == 0, result.output
        assert "Night Drive" in result.output
        assert "Neon Lights" in result.output
        assert "Rock Anthem" not in result.output

    def test_similar_unknown_track(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "similar", "nope"])

        assert result.exit_code == 1
        assert "Track not found" in result.output


class TestTrendingCommand:
    """Tests for trending command."""

    def test_trending(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "trending", "-l", "2"])

        assert result.exit_code == 0, result.output
        assert "5,000" in result.output
        assert "4,500" in result.output
        assert "3,000" not in result.output


class TestProfileCommand:
    """Tests for profile command."""

    def test_profile(self, runner: CliRunner, catalog_file: Path, events_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "-e", str(events_file), "profile", "u2"])

        assert result.exit_code == 0, result.output
        assert "Electronic" in result.output
        assert "SynthMaster" in result.output
        assert "Sunny Pop" in result.output

    def test_unknown_profile(self, runner: CliRunner, catalog_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "profile", "ghost"])

        assert result.exit_code == 0
        assert "No profile" in result.output


class TestStatsCommand:
    """Tests for stats command."""

    def test_stats(self, runner: CliRunner, catalog_file: Path, events_file: Path) -> None:
        result = runner.invoke(cli, ["-c", str(catalog_file), "-e", str(events_file), "stats"])

        assert result.exit_code == 0, result.output
        assert "Catalog Stats" in result.output
        assert "Total tracks:     7" in result.output
        assert "Known listeners:  2" in result.output
        assert "Similarity pairs: 42" in result.output
