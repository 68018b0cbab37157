"""Tests for report rendering and JSON output."""

import json

from conftest import addr
from evm_recon.models import AnalysisReport, CallOutcome, ProxyResolution, SignatureInfo
from evm_recon.reporting import render_report, report_to_dict, save_json_results
from evm_recon.core.partition import classify

TOKEN = addr("11")


def sample_report(**overrides):
    signatures = {
        "0xa9059cbb": classify("0xa9059cbb", "transfer(address,uint256)"),
        "0x8da5cb5b": classify("0x8da5cb5b", "owner()"),
        "0x313ce567": classify("0x313ce567", "decimals()"),
        "0x06fdde03": classify("0x06fdde03", "name()"),
        "0x12345678": SignatureInfo(selector="0x12345678"),
    }
    fields = dict(
        address=TOKEN,
        target_address=TOKEN,
        bytecode_size=120,
        selector_count=5,
        signatures=signatures,
        outcomes={
            "0x8da5cb5b": CallOutcome(selector="0x8da5cb5b", success=True, return_data="0x" + "00" * 32),
            "0x313ce567": CallOutcome(selector="0x313ce567", success=True, return_data="0x" + "00" * 31 + "12"),
            "0x06fdde03": CallOutcome(selector="0x06fdde03", success=True, return_data="0x"),
            "0x12345678": CallOutcome(selector="0x12345678", success=False, revert_reason="execution reverted"),
        },
        decoded={"0x8da5cb5b": "0", "0x313ce567": "18", "0x06fdde03": "Token"},
    )
    fields.update(overrides)
    return AnalysisReport(**fields)


def test_erc20_metadata_is_listed_first():
    text = render_report(sample_report())

    assert text.index("0x06fdde03 name()") < text.index("0x313ce567 decimals()")
    assert text.index("0x313ce567 decimals()") < text.index("0x8da5cb5b owner()")
    # functions that need arguments come last
    assert text.index("0x12345678 unknown") < text.index("0xa9059cbb transfer(address,uint256)")


def test_outcomes_are_rendered():
    text = render_report(sample_report())

    assert "  -> Token" in text
    assert "  -> 18" in text
    assert "  -> execution reverted" in text
    assert "Bytecode size: 120 bytes" in text
    assert "Total selectors: 5" in text
    assert text.startswith(f"Contract: {TOKEN}")


def test_proxy_header():
    implementation = addr("bb")
    report = sample_report(
        target_address=implementation,
        proxy=ProxyResolution(proxy_address=TOKEN, is_proxy=True, implementation_address=implementation),
    )
    text = render_report(report)

    assert f"Proxy Contract: {TOKEN}" in text
    assert f"Implementation: {implementation}" in text


def test_not_a_contract():
    report = AnalysisReport(address=TOKEN, target_address=TOKEN, is_contract=False)
    assert render_report(report) == f"Contract {TOKEN} was not found (no code at address)"


def test_report_to_dict():
    data = report_to_dict(sample_report())

    assert data["is_proxy"] is False
    assert [f["selector"] for f in data["functions"]][-1] == "0xa9059cbb"
    assert data["decoded"]["0x313ce567"] == "18"


def test_save_json_results(tmp_path):
    path = tmp_path / "report.json"
    save_json_results(sample_report(), path)

    data = json.loads(path.read_text())
    assert data["address"] == TOKEN
    assert data["signatures"]["0xa9059cbb"]["is_callable"] is False
