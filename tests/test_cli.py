from pathlib import Path

import pytest

from netconfig.cli import (
    EXIT_IO,
    EXIT_MALFORMED,
    EXIT_MULTIPLE_VALUES,
    EXIT_NOT_FOUND,
    main,
    split_key,
)


def test_split_key() -> None:
    assert split_key("core.editor") == ("core", None, "editor")
    assert split_key("remote.origin.main.url") == ("remote", "origin.main", "url")
    for bad in ("core", ".x", "core."):
        with pytest.raises(ValueError):
            split_key(bad)


def test_cli_edits_and_reads_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "cfg"
    cfg.write_text("[core]\n\teditor = vim\n", encoding="utf-8")
    f = ["--file", str(cfg)]

    assert main(f + ["set", "core.editor", "nano"]) == 0
    assert main(f + ["add", "remote.origin.url", "a"]) == 0
    assert main(f + ["add", "remote.origin.url", "b"]) == 0
    assert main(f + ["add", "core.bare"]) == 0
    assert cfg.read_text(encoding="utf-8") == (
        "[core]\n\teditor = nano\n\tbare\n" '[remote "origin"]\n\turl = a\n\turl = b\n'
    )
    capsys.readouterr()

    assert main(f + ["get", "core.editor"]) == 0
    assert main(f + ["get", "remote.origin.url"]) == 0
    assert main(f + ["get-all", "remote.origin.url", "!^a$"]) == 0
    assert capsys.readouterr().out == "nano\nb\nb\n"

    assert main(f + ["list"]) == 0
    assert capsys.readouterr().out == (
        "core.editor=nano\ncore.bare=true\nremote.origin.url=a\nremote.origin.url=b\n"
    )


def test_cli_exit_codes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "cfg"
    cfg.write_text("[a]\n\tx = 1\n\tx = 2\n", encoding="utf-8")
    f = ["--file", str(cfg)]

    assert main(f + ["get", "a.missing"]) == EXIT_NOT_FOUND
    assert main(f + ["unset", "a.missing"]) == EXIT_NOT_FOUND
    assert main(f + ["get", "nodot"]) == EXIT_NOT_FOUND
    assert main(f + ["set", "a.x", "3"]) == EXIT_MULTIPLE_VALUES
    assert "set_all" in capsys.readouterr().err

    assert main(f + ["set-all", "a.x", "3", "^1$"]) == 0
    assert cfg.read_text(encoding="utf-8") == "[a]\n\tx = 3\n\tx = 2\n"
    assert main(f + ["unset-all", "a.x"]) == 0
    assert cfg.read_text(encoding="utf-8") == ""

    cfg.write_text("[a\n", encoding="utf-8")
    assert main(f + ["list"]) == EXIT_MALFORMED
    assert f"{cfg}(1,3)" in capsys.readouterr().err


def test_cli_unset_saves(tmp_path: Path) -> None:
    cfg = tmp_path / "cfg"
    cfg.write_text("[a]\n\tx = 1\n[b]\n\ty = 2\n", encoding="utf-8")
    assert main(["--file", str(cfg), "unset", "a.x"]) == 0
    assert cfg.read_text(encoding="utf-8") == "[b]\n\ty = 2\n"


def test_cli_reports_bad_regex_and_io_errors(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg = tmp_path / "cfg"
    cfg.write_text("[a]\n\tx = 1\n", encoding="utf-8")
    assert main(["--file", str(cfg), "get-all", "a.x", "("]) == EXIT_NOT_FOUND
    assert "error:" in capsys.readouterr().err

    missing_dir = tmp_path / "nope" / "cfg"
    assert main(["--file", str(missing_dir), "set", "a.x", "1"]) == EXIT_IO
    assert "error:" in capsys.readouterr().err
