import pytest

from methsig.methsig_config import Config, load_config
from methsig.__main__ import main, render


def test_defaults():
    config = Config()
    assert config == Config(debug=False, allow_alias=True, invocant="$self")

def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "methsig.yaml"
    path.write_text("debug: true\nallow_alias: false\ninvocant: $this\n", encoding="utf-8")
    config = load_config(path)
    assert config == Config(debug=True, allow_alias=False, invocant="$this")

def test_empty_yaml_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == Config()

def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("colour: blue\n", encoding="utf-8")
    with pytest.raises(ValueError, match="unknown methsig config key"):
        load_config(path)

def test_non_mapping_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_config(path)

def test_invalid_invocant_rejected():
    with pytest.raises(ValueError, match="invalid invocant"):
        Config.from_mapping({"invocant": "$not valid"})

def test_from_env_debug_flag():
    assert Config.from_env({"METHSIG_DEBUG": "1"}).debug is True
    assert Config.from_env({}).debug is False

def test_from_env_reads_config_file(tmp_path):
    path = tmp_path / "methsig.yaml"
    path.write_text("invocant: me\n", encoding="utf-8")
    config = Config.from_env({"METHSIG_CONFIG": str(path)})
    assert config.invocant == "me"
    assert config.debug is False


# --- Command line ---

def test_render_split():
    assert render("$a, $h = {'x': 1, 'y': 2}", split=True) == "$a\n$h = {'x': 1, 'y': 2}"

def test_render_method_plan():
    assert render("$key", method=True, config=Config()) == (
        "self = shift(args)\n"
        "key = args[0] if len(args) > 0 else missing('$key')"
    )

def test_main_prints_plan(capsys):
    assert main(["$a, @rest"]) == 0
    out = capsys.readouterr().out
    assert "rest = list(args[1:])" in out

def test_main_reports_signature_error(capsys):
    assert main(["@a, %b"]) == 1
    err = capsys.readouterr().err
    assert "multiple slurpy parameters" in err

def test_main_repl_runs_until_exit(monkeypatch, capsys):
    lines = iter(["$a", "$x, :$y, $z", "exit"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    assert main([]) == 0
    captured = capsys.readouterr()
    assert "a = args[0]" in captured.out
    assert "positional parameter after named parameter" in captured.err
