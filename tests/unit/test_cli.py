"""
Unit tests for the command-line entry point.
"""

import socket
from pathlib import Path

import pytest

from assetserver.__main__ import build_parser, main
from assetserver.config import ServerConfig


def test_parser_defaults():
    args = build_parser(ServerConfig()).parse_args([])

    assert args.host == "127.0.0.1"
    assert args.port == 8080
    assert args.root == "dist"
    assert args.bundle is None
    assert args.log_level == "INFO"


def test_parser_overrides():
    args = build_parser(ServerConfig()).parse_args(
        ["-p", "3000", "-r", "www", "-b", "assets", "-t", "2", "-l", "debug"]
    )

    assert args.port == 3000
    assert args.root == "www"
    assert args.bundle == "assets"
    assert args.timeout == 2.0
    assert args.log_level == "DEBUG"


def test_invalid_config_exit_code(capsys):
    assert main(["--host", "0.0.0.0"]) == 2
    assert "loopback" in capsys.readouterr().err


def test_bind_error_exit_code(capsys, asset_dir: Path):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]

        code = main(["--port", str(port), "--root", str(asset_dir), "-l", "ERROR"])

    assert code == 1
    assert f"127.0.0.1:{port}" in capsys.readouterr().err


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--version"])
    assert exc_info.value.code == 0
    assert "assetserver" in capsys.readouterr().out


def test_invalid_environment_exit_code(capsys, monkeypatch):
    monkeypatch.setenv("ASSET_SERVER_PORT", "abc")

    assert main([]) == 2
    err = capsys.readouterr().err
    assert err.startswith("Error:")
    assert "abc" in err
