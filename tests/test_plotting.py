from grtree.plotting import draw_series


def test_draw_series_writes_png(tmp_path):
    path = tmp_path / "roc.png"
    out = draw_series([(0.0, 0.0), (0.4, 0.8), (float("nan"), 0.9), (1.0, 1.0)], path, "ROC curve")
    assert out == str(path)
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_draw_series_empty(tmp_path):
    path = tmp_path / "pr.png"
    draw_series([], path, "PR curve")
    assert path.exists()
