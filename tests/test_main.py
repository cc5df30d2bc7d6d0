from unittest.mock import MagicMock, patch

import pytest

import main
from redirects.errors import StoreUnavailableError


@pytest.fixture
def store_env(monkeypatch, tmp_path):
    monkeypatch.setenv("S3_BUCKET", "test-bucket")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("S3REDIRECT_TARGET_FORMAT", "https://x/?s=%s")
    monkeypatch.setattr("config.CONFIG_FILE", tmp_path / "missing.json")


def test_get_prints_identifier(store_env, fake_boto, capsys):
    assert main.main(["get", "cats"]) == 0

    identifier = capsys.readouterr().out.strip()
    assert len(identifier) == 6
    assert fake_boto.objects["state/cats"]["Body"] == identifier.encode()
    assert fake_boto.objects[identifier]["WebsiteRedirectLocation"] == "https://x/?s=cats"


def test_get_twice_prints_same_identifier(store_env, fake_boto, capsys):
    main.main(["get", "cats"])
    first = capsys.readouterr().out.strip()
    main.main(["get", "cats"])
    assert capsys.readouterr().out.strip() == first


def test_get_exits_non_zero_on_store_error(store_env, capsys):
    provider = MagicMock()
    provider.allocate.side_effect = StoreUnavailableError("boom")

    with patch("main.build_provider", return_value=provider):
        assert main.main(["get", "cats"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "boom" in captured.err


def test_get_exits_non_zero_when_bucket_missing(store_env, monkeypatch, capsys):
    monkeypatch.delenv("S3_BUCKET")
    assert main.main(["get", "cats"]) == 1
    assert "S3_BUCKET" in capsys.readouterr().err


def test_get_rejects_empty_key(store_env, capsys):
    assert main.main(["get", ""]) == 1


@pytest.mark.parametrize("argv", [[], ["get"], ["put", "cats"]])
def test_malformed_arguments_exit_non_zero(argv):
    with pytest.raises(SystemExit) as exc_info:
        main.main(argv)
    assert exc_info.value.code != 0


def test_unknown_log_level_does_not_abort_get(store_env, fake_boto, monkeypatch, capsys):
    monkeypatch.setenv("LOG_LEVEL", "loud")
    assert main.main(["get", "cats"]) == 0
    assert len(capsys.readouterr().out.strip()) == 6
