import pytest

pytest.importorskip("matplotlib")

import report


def test_make_record():
    record = report.make_record(4, 10, (55, -55, 3628800), 0.002)
    assert record == {
        'processes': 4, 'workers': 3, 'n': 10, 'sum': 55,
        'negated_sum': -55, 'product': 3628800, 'elapsed_s': 0.002,
    }


def test_append_writes_header_once(tmp_path):
    csv_path = tmp_path / "runs.csv"
    report.append_run_record(str(csv_path), report.make_record(2, 10, (55, -55, 3628800), 0.01))
    report.append_run_record(str(csv_path), report.make_record(3, 10, (55, -55, 3628800), 0.02))

    df = report.load_runs(str(csv_path))
    assert list(df.columns) == report.COLUMNS
    assert df['processes'].tolist() == [2, 3]
    assert csv_path.read_text().count("processes") == 1


def test_plot_timings_saves_png(tmp_path):
    csv_path = tmp_path / "runs.csv"
    for procs, elapsed in [(2, 0.01), (2, 0.03), (4, 0.02)]:
        report.append_run_record(str(csv_path), report.make_record(procs, 10, (55, -55, 3628800), elapsed))

    png = tmp_path / "timings.png"
    report.plot_timings(str(csv_path), str(png))
    assert png.exists()
    assert png.stat().st_size > 0
