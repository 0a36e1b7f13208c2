from __future__ import annotations

import logging
from pathlib import Path

import pytest

from rank_similarity.config import config_from_mapping, load_config
from rank_similarity.pipelines import check_outputs, generate_table, rank_users
from rank_similarity.ranking.report import load_ranking


RATINGS = "4 3\n1 2 1 3\n2 5 9 1\n3 2 1 3\n4 1 3 2\n"


def _config(tmp_path: Path, **comparison: object):
    return config_from_mapping(
        {
            "dataset": {
                "input_dir": "data/input",
                "expected_dir": "data/output/expected",
                "actual_dir": "data/output/actual",
            },
            "comparison": comparison,
        },
        repo_root=tmp_path,
    )


def test_run_ranking_writes_expected_file(tmp_path: Path) -> None:
    input_path = tmp_path / "ratings.txt"
    input_path.write_text(RATINGS)
    output_path = tmp_path / "out" / "deep" / "1.txt"

    results = rank_users.run_ranking(
        input_path,
        1,
        output_path,
        config=_config(tmp_path, require_permutations=False),
    )

    # userId=2 -> collision [9, 5, 1] -> 3 inversions
    assert output_path.read_text() == "1\n3 0\n4 2\n2 3\n"
    assert [r.userId for r in results] == [3, 4, 2]


def test_run_ranking_missing_input(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        rank_users.run_ranking(tmp_path / "missing.txt", 1, tmp_path / "out.txt", config=_config(tmp_path))


def test_rank_users_cli(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    input_path = tmp_path / "ratings.txt"
    input_path.write_text("3 2\n1 1 2\n2 2 1\n3 1 2\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("comparison:\n  duplicate_user_ids: error\n")
    output_path = tmp_path / "result" / "2.txt"

    rank_users.main([str(input_path), "2", str(output_path), "--config", str(config_path), "--show", "5"])

    assert output_path.read_text() == "2\n1 1\n3 1\n"
    assert "Most similar to userId=2" in capsys.readouterr().out


def test_rank_users_cli_unknown_user_exits(tmp_path: Path) -> None:
    input_path = tmp_path / "ratings.txt"
    input_path.write_text("1 2\n1 1 2\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("logging:\n  level: warning\n")

    with pytest.raises(SystemExit) as exc_info:
        rank_users.main([str(input_path), "9", str(tmp_path / "out.txt"), "--config", str(config_path)])
    assert exc_info.value.code == 2


def test_check_outputs_passes_and_flags_mismatches(tmp_path: Path) -> None:
    config = _config(tmp_path, require_permutations=False)
    paths = config.paths
    paths.ensure_dirs()

    (paths.input_dir / "small.txt").write_text(RATINGS)
    (paths.input_dir / "notes.md").write_text("ignored\n")
    (paths.input_dir / "orphan.txt").write_text("1 1\n1 1\n")
    case_dir = paths.expected_dir / "small"
    case_dir.mkdir(parents=True)
    (case_dir / "1.txt").write_text("1\n3 0\n4 2\n2 3\n")
    (case_dir / "4.txt").write_text("4\n2 0\n")

    results = check_outputs.run_output_check(config)

    by_target = {r.target_user_id: r for r in results}
    assert set(by_target) == {1, 4}
    assert by_target[1].passed
    assert not by_target[4].passed
    assert (paths.actual_dir / "small" / "1.txt").read_text() == "1\n3 0\n4 2\n2 3\n"
    assert load_ranking(paths.actual_dir / "small" / "4.txt")[0] == 4


def test_check_outputs_cli_exit_code(tmp_path: Path) -> None:
    (tmp_path / "data" / "input").mkdir(parents=True)
    (tmp_path / "data" / "input" / "t.txt").write_text("2 2\n1 1 2\n2 2 1\n")
    case_dir = tmp_path / "data" / "output" / "expected" / "t"
    case_dir.mkdir(parents=True)
    (case_dir / "1.txt").write_text("1\n2 1\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("dataset:\n  input_dir: data/input\n")

    check_outputs.main(["--config", str(config_path)])

    (case_dir / "2.txt").write_text("2\n1 0\n")
    with pytest.raises(SystemExit) as exc_info:
        check_outputs.main(["--config", str(config_path)])
    assert exc_info.value.code == 1


def test_generate_table_cli(tmp_path: Path) -> None:
    out = tmp_path / "gen" / "table.txt"
    generate_table.main([str(out), "--users", "4", "--items", "6", "--seed", "9"])

    lines = out.read_text().splitlines()
    assert lines[0] == "4 6"
    assert [int(line.split()[0]) for line in lines[1:]] == [1, 2, 3, 4]
    assert all(sorted(map(int, line.split()[1:])) == list(range(1, 7)) for line in lines[1:])


def test_load_config_defaults_and_validation(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".git").mkdir()
    cfg = load_config()
    assert cfg.comparison.duplicate_user_ids == "error"
    assert cfg.comparison.require_permutations is True
    assert cfg.paths.input_dir == (tmp_path / "data" / "input").resolve()
    assert cfg.source is None

    bad = tmp_path / "config.yaml"
    bad.write_text("comparison:\n  duplicate_user_ids: first\n")
    with pytest.raises(ValueError):
        load_config()

    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "text",
    [
        "2 2\n1 1 2\n2 2 \u0661\n",
        "\u00b2 2\n1 1 2\n2 2 1\n",
    ],
)
def test_rank_users_cli_non_ascii_digits_exit(tmp_path: Path, text: str) -> None:
    input_path = tmp_path / "ratings.txt"
    input_path.write_text(text, encoding="utf-8")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("logging:\n  level: warning\n")

    with pytest.raises(SystemExit) as exc_info:
        rank_users.main([str(input_path), "1", str(tmp_path / "out.txt"), "--config", str(config_path)])
    assert exc_info.value.code == 2


def test_mismatch_log_names_first_differing_row(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    config = _config(tmp_path, require_permutations=False)
    paths = config.paths
    paths.ensure_dirs()
    (paths.input_dir / "small.txt").write_text(RATINGS)
    case_dir = paths.expected_dir / "small"
    case_dir.mkdir(parents=True)
    (case_dir / "1.txt").write_text("1\n3 0\n4 1\n2 3\n")

    with caplog.at_level(logging.ERROR):
        results = check_outputs.run_output_check(config)

    assert not results[0].passed
    assert "row 2: expected=(4 1) actual=(4 2)" in caplog.text


def test_describe_difference(tmp_path: Path) -> None:
    actual = tmp_path / "actual.txt"
    actual.write_text("1\n3 0\n4 2\n")

    def expected(text: str) -> Path:
        path = tmp_path / "expected.txt"
        path.write_text(text)
        return path

    assert check_outputs.describe_difference(expected("2\n3 0\n4 2\n"), actual) == (
        "target userId expected=2 actual=1"
    )
    assert check_outputs.describe_difference(expected("1\n3 0\n"), actual) == "expected 1 rows, got 2"
    assert check_outputs.describe_difference(expected("1\n3 0\n\n4 2\n"), actual) == (
        "same rows, files differ in whitespace or line endings"
    )
    assert check_outputs.describe_difference(expected("x\n"), actual).startswith("cannot parse ranking")


def test_check_outputs_cli_bad_case_name_exits(tmp_path: Path) -> None:
    (tmp_path / "data" / "input").mkdir(parents=True)
    (tmp_path / "data" / "input" / "t.txt").write_text("2 2\n1 1 2\n2 2 1\n")
    case_dir = tmp_path / "data" / "output" / "expected" / "t"
    case_dir.mkdir(parents=True)
    (case_dir / "first.txt").write_text("1\n2 1\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("logging:\n  level: warning\n")

    with pytest.raises(SystemExit) as exc_info:
        check_outputs.main(["--config", str(config_path)])
    assert exc_info.value.code == 2


def test_run_ranking_uses_configured_duplicate_policy(tmp_path: Path) -> None:
    input_path = tmp_path / "ratings.txt"
    input_path.write_text("4 3\n1 1 2 3\n2 3 2 1\n3 1 2 3\n1 3 2 1\n")

    config = _config(tmp_path, duplicate_user_ids="last")
    assert config.comparison.duplicate_user_ids == "last"

    results = rank_users.run_ranking(input_path, 1, tmp_path / "out.txt", config=config)
    assert [(r.userId, r.inversions) for r in results] == [(2, 0), (3, 3)]
