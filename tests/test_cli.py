from csemit.cli import main

MODELS = '''
from markers import export


@export(kind="record")
class Order:
    order_id: int
    total: float = 0.0
'''


def test_generate_command(tmp_path, capsys) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "shop.py").write_text(MODELS, encoding="utf-8")
    out = tmp_path / "out"

    assert main(["generate", str(src), "--out", str(out)]) == 0
    printed = capsys.readouterr().out.split()
    assert printed == ["Csemit.ExportAttribute.g.cs", "shop.Order.g.cs"]
    text = (out / "shop.Order.g.cs").read_text(encoding="utf-8")
    assert "public partial record Order" in text
    assert "\tpublic double Total { get; init; } = 0.0;" in text


def test_generate_with_overrides(tmp_path, capsys) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "shop.py").write_text(MODELS, encoding="utf-8")
    out = tmp_path / "out"

    argv = ["generate", str(src), "--out", str(out), "--namespace", "Shop", "--no-attribute-source", "--no-to-string", "-v"]
    assert main(argv) == 0
    assert capsys.readouterr().out.split() == ["Shop.Order.g.cs"]
    text = (out / "Shop.Order.g.cs").read_text(encoding="utf-8")
    assert "namespace Shop;" in text
    assert "ToString" not in text


def test_missing_root(tmp_path, capsys) -> None:
    assert main(["generate", str(tmp_path / "nope"), "--out", str(tmp_path / "out")]) == 2
    assert "Not a directory" in capsys.readouterr().err


def test_unsupported_kind_does_not_abort_run(tmp_path, capsys) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "shop.py").write_text(MODELS + '\n\n@export(kind="enum")\nclass Status:\n    code: int\n', encoding="utf-8")
    out = tmp_path / "out"

    assert main(["generate", str(src), "--out", str(out), "--no-attribute-source"]) == 0
    assert capsys.readouterr().out.split() == ["shop.Order.g.cs"]
    assert not (out / "shop.Status.g.cs").exists()
