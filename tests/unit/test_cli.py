"""Unit tests for scripts/qrpass_cli.py."""

import json

from scripts.qrpass_cli import main


class TestIssueCommand:
    def test_prints_token(self, capsys):
        assert main(["issue", "--item-code", "SKU-1", "--price", "500", "--amount", "2"]) == 0
        token = capsys.readouterr().out.strip()
        assert token.count(".") == 2

    def test_writes_qr_png(self, tmp_path, capsys):
        out = tmp_path / "pass.png"
        code = main(
            ["issue", "--item-code", "SKU-1", "--price", "500", "--amount", "2", "--qr", str(out)]
        )
        assert code == 0
        assert out.read_bytes().startswith(b"\x89PNG")
        assert "jti=" in capsys.readouterr().out

    def test_invalid_payload_exit_code(self, capsys):
        assert main(["issue", "--item-code", "SKU-1", "--price", "-1", "--amount", "2"]) == 2
        assert "price" in capsys.readouterr().err


class TestVerifyCommand:
    def test_round_trip(self, capsys):
        main(["issue", "--item-code", "SKU-1", "--price", "500", "--amount", "2"])
        token = capsys.readouterr().out.strip()

        assert main(["verify", token]) == 0
        claims = json.loads(capsys.readouterr().out)
        assert claims["item"] == {"item_code": "SKU-1", "price": 500, "amount": 2}

    def test_rejected_token(self, capsys):
        assert main(["verify", "not-a-token"]) == 1
        assert "malformed" in capsys.readouterr().err
