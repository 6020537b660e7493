import sys

from tranche_engine import cli
from tranche_engine.scripts.make_sample_input import write_sample_input


def test_cli_writes_pack(tmp_path, monkeypatch, capsys):
    inp = tmp_path / "pool.xlsx"
    out = tmp_path / "pack.xlsx"
    write_sample_input(str(inp))
    monkeypatch.setattr(
        sys, "argv",
        ["tranche-engine", "--input", str(inp), "--template", str(tmp_path / "tpl.xlsx"),
         "--output", str(out), "--log-level", "WARNING"],
    )

    assert cli.main() == 0
    assert out.exists()
    assert "0 failed" in capsys.readouterr().out
