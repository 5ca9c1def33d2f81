import pytest

from mkappa.cli import build_parser, main


@pytest.fixture
def rater_files(write_csv):
    return [
        write_csv("ana.csv", "Praise,Criticism,Question\n1,0,0\n1,1,0\n0,1,0\n"),
        write_csv("ben.csv", "Praise,Criticism,Question\n1,0,0\n0,1,0\n0,1,1\n"),
    ]


def test_parser_defaults():
    args = build_parser().parse_args(["a.csv", "b.csv"])

    assert args.confidence_level == 0.95
    assert args.output is None
    assert not args.verbose


def test_main_writes_report(rater_files, tmp_path, capsys):
    out_dir = tmp_path / "reports"

    code = main([str(p) for p in rater_files] + ["--output_dir", str(out_dir)])

    assert code == 0
    reports = list(out_dir.glob("mkappa_r2_*.csv"))
    assert len(reports) == 1
    text = reports[0].read_text()
    assert "Segment,ana Codes,ben Codes,Proportional Agreement" in text
    assert "2,\"Praise, Criticism\",Criticism,0.5" in text

    out = capsys.readouterr().out
    assert "Mezzich's Kappa: 0.5000 (Moderate)" in out
    assert "t(2) = 1.7321" in out


def test_main_explicit_output(rater_files, tmp_path):
    target = tmp_path / "kappa.csv"

    code = main([str(p) for p in rater_files] + ["--output", str(target), "--confidence_level", "0.9"])

    assert code == 0
    assert "90% Confidence Interval" in target.read_text()


def test_main_reports_undefined_segment(write_csv, tmp_path, capsys):
    files = [
        write_csv("a.csv", "1,0\n1,1\n0,0\n"),
        write_csv("b.csv", "1,0\n0,1\n0,0\n"),
    ]

    code = main([str(p) for p in files] + ["--output_dir", str(tmp_path)])

    assert code == 1
    assert "Segment 3" in capsys.readouterr().err
    assert not list(tmp_path.glob("mkappa_*.csv"))


def test_main_rejects_bad_confidence_level(rater_files, capsys):
    code = main([str(p) for p in rater_files] + ["--confidence_level", "95"])

    assert code == 1
    assert "Confidence level" in capsys.readouterr().err


def test_main_needs_two_files(rater_files):
    with pytest.raises(SystemExit) as exc_info:
        main([str(rater_files[0])])

    assert exc_info.value.code == 2


def test_main_missing_file(rater_files, tmp_path):
    with pytest.raises(SystemExit):
        main([str(rater_files[0]), str(tmp_path / "missing.csv")])


def test_main_keeps_raters_with_the_same_file_name(tmp_path):
    for folder, rows in (("a", "1,0\n1,1\n0,1\n"), ("b", "1,0\n1,0\n0,1\n")):
        (tmp_path / folder).mkdir()
        (tmp_path / folder / "rater.csv").write_text(rows)
    first, second = tmp_path / "a" / "rater.csv", tmp_path / "b" / "rater.csv"
    target = tmp_path / "kappa.csv"

    code = main([str(first), str(second), "--output", str(target)])

    assert code == 0
    lines = target.read_text().splitlines()
    assert f"Segment,{first} Codes,{second} Codes,Proportional Agreement" in lines
    assert '2,"c1, c2",c1,0.5' in lines
