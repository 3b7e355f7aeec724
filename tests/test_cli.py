import pytest
from click.testing import CliRunner

from listening_dataset.cli import main


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("LISTENING_HISTORY_PATH", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("TOP_SONGS_LIMIT", raising=False)
    return CliRunner()


def test_stats(runner, triplets_file):
    result = runner.invoke(main, ["stats", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["Users: 3\tSongs: 3", "Size: 6"]


def test_stats_uses_env_history(runner, triplets_file, monkeypatch):
    monkeypatch.setenv("LISTENING_HISTORY_PATH", str(triplets_file))
    result = runner.invoke(main, ["stats"])
    assert result.exit_code == 0, result.output
    assert "Users: 3" in result.output


def test_missing_history(runner, tmp_path):
    result = runner.invoke(main, ["stats"])
    assert result.exit_code == 1
    assert "No listening history given" in result.output

    result = runner.invoke(main, ["stats", "--history", str(tmp_path / "nope.txt")])
    assert result.exit_code == 1
    assert "not found" in result.output


@pytest.mark.parametrize("backend", ["dataset", "duckdb"])
def test_top_songs(runner, triplets_file, backend):
    result = runner.invoke(
        main,
        ["top-songs", "--history", str(triplets_file), "--limit", "2", "--backend", backend],
    )
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["1\ts1\t3", "2\ts2\t2"]


def test_top_songs_default_limit_from_env(runner, triplets_file, monkeypatch):
    monkeypatch.setenv("TOP_SONGS_LIMIT", "1")
    result = runner.invoke(main, ["top-songs", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["1\ts1\t3"]


def test_top_songs_rejects_negative_limit(runner, triplets_file):
    result = runner.invoke(main, ["top-songs", "--history", str(triplets_file), "--limit", "-1"])
    assert result.exit_code == 2


def test_user_songs_and_song_users(runner, triplets_file):
    result = runner.invoke(main, ["user-songs", "u3", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output
    assert sorted(result.output.splitlines()) == ["s1", "s3"]

    result = runner.invoke(main, ["song-users", "s2", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == ["u1", "u2"]


def test_unknown_ids_print_nothing(runner, triplets_file):
    result = runner.invoke(main, ["user-songs", "nobody", "--history", str(triplets_file)])
    assert result.exit_code == 0
    assert result.output == ""


def test_bad_history_file(runner, tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("u1\ts1\t-4\n", encoding="utf-8")
    result = runner.invoke(main, ["stats", "--history", str(path), "--validate"])
    assert result.exit_code == 1
    assert "Negative play count" in result.output


def test_bad_limit_env_only_affects_top_songs(runner, triplets_file, monkeypatch):
    monkeypatch.setenv("TOP_SONGS_LIMIT", "ten")

    result = runner.invoke(main, ["stats", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output
    assert "Users: 3" in result.output

    result = runner.invoke(main, ["song-users", "s2", "--history", str(triplets_file)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(main, ["top-songs", "--history", str(triplets_file)])
    assert result.exit_code == 1
    assert "TOP_SONGS_LIMIT must be an integer" in result.output
    assert isinstance(result.exception, SystemExit)


@pytest.mark.parametrize("backend", ["dataset", "duckdb"])
def test_negative_limit_env_rejected(runner, triplets_file, monkeypatch, backend):
    monkeypatch.setenv("TOP_SONGS_LIMIT", "-1")
    result = runner.invoke(
        main, ["top-songs", "--history", str(triplets_file), "--backend", backend]
    )
    assert result.exit_code == 1
    assert "TOP_SONGS_LIMIT must be at least 0" in result.output


def test_unknown_log_level(runner, triplets_file, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    result = runner.invoke(main, ["stats", "--history", str(triplets_file)])
    assert result.exit_code == 1
    assert "LOG_LEVEL must be one of" in result.output
    assert isinstance(result.exception, SystemExit)


@pytest.mark.parametrize("backend", ["dataset", "duckdb"])
def test_validate_passes_for_triplet_files(runner, triplets_file, backend):
    result = runner.invoke(
        main,
        ["top-songs", "--history", str(triplets_file), "--validate", "--backend", backend],
    )
    assert result.exit_code == 0, result.output
    assert result.output.splitlines()[0] == "1\ts1\t3"
