from pathlib import Path

from tools.verify import main

CONFIGS = Path(__file__).resolve().parent.parent / "configs"


def test_verify_small(capsys):
    assert main(["--cfg", str(CONFIGS / "small.py")]) == 0
    out = capsys.readouterr().out
    assert "4/4 configurations passed" in out
    assert "SKIPPED" in out


def test_verify_overrides(capsys):
    assert main(["--cfg", str(CONFIGS / "small.py"), "--set", "post_op=Relu", "m=2"]) == 0
    assert "post=Relu" in capsys.readouterr().out


def test_verify_malformed_entry_fails(tmp_path, capsys):
    cfg_file = tmp_path / "mixed.py"
    cfg_file.write_text(
        "from refnorm.config import LayernormConf\n"
        "cfg = [LayernormConf(m=2, n=4), LayernormConf(m=2, n=4, lengths=[2, 5])]\n"
    )
    assert main(["--cfg", str(cfg_file)]) == 1
    out = capsys.readouterr().out
    assert "ERROR" in out
    assert "1/2 configurations passed" in out
