import json

import pytest

from vrf_raffle.cli import build_parser, parse_entry
from vrf_raffle.config import Settings
from vrf_raffle.project_constants import (
    DEFAULT_CALLBACK_GAS_LIMIT,
    DEFAULT_KEY_HASH,
    MOCK_COORDINATOR_ADDRESS,
    ONE_ETHER,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in (
        "VRF_RPC_URL",
        "VRF_COORDINATOR",
        "VRF_KEY_HASH",
        "VRF_SUBSCRIPTION_ID",
        "VRF_CALLBACK_GAS_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)


def run(argv):
    args = build_parser().parse_args(argv)
    return args.func(args)


def test_settings_defaults():
    settings = Settings.from_env()

    assert settings.rpc_url is None
    assert settings.coordinator == MOCK_COORDINATOR_ADDRESS
    assert settings.key_hash == DEFAULT_KEY_HASH
    assert settings.callback_gas_limit == DEFAULT_CALLBACK_GAS_LIMIT
    with pytest.raises(RuntimeError):
        settings.require_rpc_url()


def test_settings_from_env_and_override(monkeypatch):
    monkeypatch.setenv("VRF_RPC_URL", "http://env.test")
    monkeypatch.setenv("VRF_SUBSCRIPTION_ID", "77")
    monkeypatch.setenv("VRF_CALLBACK_GAS_LIMIT", "250000")

    assert Settings.from_env().rpc_url == "http://env.test"
    assert Settings.from_env().subscription_id == 77
    assert Settings.from_env().callback_gas_limit == 250_000
    assert Settings.from_env("http://cli.test").require_rpc_url() == "http://cli.test"


def test_parse_entry():
    assert parse_entry("0xB0:1.5") == ("0xB0", 3 * ONE_ETHER // 2)
    with pytest.raises(Exception):
        parse_entry("no-amount")


def test_simulate_then_verify(tmp_path, capsys):
    out = tmp_path / "audit.json"
    assert (
        run(
            [
                "simulate",
                "--owner", "0xA0",
                "--fee", "1",
                "--entry", "0xB0:1",
                "--entry", "0xC0:5",
                "--seed", "fixed",
                "--out", str(out),
            ]
        )
        == 0
    )
    audit = json.loads(out.read_text(encoding="utf-8"))
    assert audit["all_entrants"] == [
        {"address": "0xB0", "paid": str(ONE_ETHER)},
        {"address": "0xC0", "paid": str(5 * ONE_ETHER)},
    ]
    assert audit["metadata"]["owner_fee"] == str(6 * ONE_ETHER // 10)

    assert run(["verify", "--audit", str(out)]) == 0
    assert "AUDIT VERIFIED" in capsys.readouterr().out


def test_simulate_without_entries(tmp_path, capsys):
    out = tmp_path / "audit.json"
    assert run(["simulate", "--owner", "0xA0", "--out", str(out)]) == 0
    assert not out.exists()
    assert "no entrants" in capsys.readouterr().out


def test_simulate_refused_payout_exits(tmp_path):
    with pytest.raises(SystemExit):
        run(
            [
                "simulate",
                "--owner", "0xA0",
                "--entry", "0xB0:1",
                "--reject", "0xA0",
                "--out", str(tmp_path / "audit.json"),
            ]
        )


def test_verify_tampered_audit_exits(tmp_path):
    out = tmp_path / "audit.json"
    run(["simulate", "--owner", "0xA0", "--entry", "0xB0:1", "--out", str(out)])
    audit = json.loads(out.read_text(encoding="utf-8"))
    audit["winner"]["prize"] = "0"
    out.write_text(json.dumps(audit), encoding="utf-8")

    with pytest.raises(SystemExit):
        run(["verify", "--audit", str(out)])
