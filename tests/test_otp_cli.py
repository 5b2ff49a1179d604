"""Tests for the otpkit command line."""

import logging

import pytest

from otpkit.otp_cli import EXIT_INVALID_CODE, EXIT_OK, EXIT_USAGE, SECRET_ENV, main

RFC_KEY_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture(autouse=True)
def no_env_secret(monkeypatch):
    monkeypatch.delenv(SECRET_ENV, raising=False)


class TestDecodeCommand:
    """otpkit decode."""

    def test_prints_hex(self, capsys):
        assert main(["decode", "JBSWY3DPEHPK3PXP"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "48656c6c6f21deadbeef"

    def test_grouped_secret(self, capsys):
        assert main(["decode", "32w3 53y"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "deadbeef"

    def test_invalid_symbol(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["decode", "32W39"])
        assert exc_info.value.code == EXIT_USAGE
        assert "Invalid Base32 character" in capsys.readouterr().err


class TestHotpCommand:
    """otpkit hotp."""

    def test_rfc_counter(self, capsys):
        assert main(["hotp", "--secret", RFC_KEY_B32, "--counter", "0"]) == EXIT_OK
        assert capsys.readouterr().out.strip() == "HOTP(6d, counter=0): 755224"

    def test_secret_from_environment(self, capsys, monkeypatch):
        monkeypatch.setenv(SECRET_ENV, RFC_KEY_B32)
        assert main(["hotp", "--counter", "1"]) == EXIT_OK
        assert "287082" in capsys.readouterr().out

    def test_missing_secret(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["hotp", "--counter", "1"])
        assert exc_info.value.code == EXIT_USAGE

    def test_digits_out_of_range(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["hotp", "--secret", RFC_KEY_B32, "--counter", "1", "--digits", "9"])
        assert exc_info.value.code == EXIT_USAGE

    def test_negative_counter(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["hotp", "--secret", RFC_KEY_B32, "--counter", "-1"])
        assert exc_info.value.code == EXIT_USAGE
        assert "counter" in capsys.readouterr().err

    def test_verbose_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="otpkit.otp_cli"):
            main(["--verbose", "hotp", "--secret", RFC_KEY_B32, "--counter", "0"])
        assert "counter=0" in caplog.text


class TestTotpCommand:
    """otpkit totp."""

    def test_fixed_time(self, capsys):
        rc = main(["totp", "--secret", RFC_KEY_B32, "--now", "59", "--digits", "8"])
        assert rc == EXIT_OK
        out = capsys.readouterr().out
        assert "94287082" in out
        assert "valid ~ 1s" in out

    def test_now_before_t0(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["totp", "--secret", RFC_KEY_B32, "--now", "10", "--t0", "20"])
        assert exc_info.value.code == EXIT_USAGE

    def test_watch_with_fixed_time(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["totp", "--secret", RFC_KEY_B32, "--watch", "--now", "59"])
        assert exc_info.value.code == EXIT_USAGE
        assert "--watch" in capsys.readouterr().err

    def test_zero_period(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["totp", "--secret", RFC_KEY_B32, "--period", "0"])
        assert exc_info.value.code == EXIT_USAGE


class TestVerifyCommand:
    """otpkit verify."""

    def test_totp_valid(self, capsys):
        argv = ["verify", "totp", "--secret", RFC_KEY_B32, "--code", "94287082",
                "--digits", "8", "--now", "59"]
        assert main(argv) == EXIT_OK
        assert "VALID" in capsys.readouterr().out

    def test_totp_invalid(self, capsys):
        argv = ["verify", "totp", "--secret", RFC_KEY_B32, "--code", "000000", "--now", "59"]
        assert main(argv) == EXIT_INVALID_CODE
        assert "INVALID" in capsys.readouterr().out

    def test_hotp_look_ahead(self, capsys):
        argv = ["verify", "hotp", "--secret", RFC_KEY_B32, "--code", "359152",
                "--counter", "0", "--look-ahead", "2"]
        assert main(argv) == EXIT_OK
        assert "next counter = 3" in capsys.readouterr().out

    def test_hotp_invalid(self):
        argv = ["verify", "hotp", "--secret", RFC_KEY_B32, "--code", "359152", "--counter", "0"]
        assert main(argv) == EXIT_INVALID_CODE

    def test_type_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["verify"])
        assert exc_info.value.code == EXIT_USAGE


def test_no_command(capsys):
    assert main([]) == EXIT_OK
    assert "-h" in capsys.readouterr().out
