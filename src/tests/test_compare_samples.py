from compare_samples import compare_files


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_exit_codes(tmp_path, capsys):
    reference = _write(tmp_path, "ref.json", '{"id": 1, "name": "x"}')
    additive = _write(tmp_path, "add.json", '{"id": 2, "name": "y", "email": "z"}')
    breaking = _write(tmp_path, "break.json", '{"id": "2"}')
    broken = _write(tmp_path, "broken.json", "{")

    assert compare_files(reference, additive) == 0
    assert "type Reference = {" in capsys.readouterr().out

    assert compare_files(reference, breaking) == 1
    assert "BREAKING" in capsys.readouterr().out

    assert compare_files(reference, broken) == 2
    assert compare_files(reference, str(tmp_path / "absent.json")) == 2
