from wallbounce.cli import build_parser, main


def test_init_creates_sample_config(tmp_path):
    path = tmp_path / "wallbounce.yaml"
    assert main(["--init", "--config", str(path)]) == 0
    assert path.exists()
    assert "default_models" in path.read_text(encoding="utf-8")


def test_models_lists_catalog(tmp_path):
    assert main(["--models", "--config", str(tmp_path / "missing")]) == 0


def test_missing_query_exits_with_usage_code(tmp_path):
    assert main(["--config", str(tmp_path / "missing")]) == 2


def test_no_bound_models_fails(tmp_path):
    assert main(["--config", str(tmp_path / "missing"), "why is it slow?"]) == 1


def test_invalid_config_fails(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("models: [unclosed", encoding="utf-8")
    assert main(["--config", str(path), "q"]) == 1


def test_repeated_model_flags_keep_order():
    args = build_parser().parse_args(["-m", "o3-mini", "-m", "gpt-5", "-t", "coding", "q"])
    assert args.selected_models == ["o3-mini", "gpt-5"]
    assert args.task == "coding"
    assert args.query == "q"
