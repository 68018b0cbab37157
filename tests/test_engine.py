"""End-to-end tests of ContractAnalyzer against an in-memory chain."""

import pytest

from conftest import addr, dispatcher_bytecode, encode, word
from evm_recon.config import DEFAULT_MULTICALL3_ADDRESS
from evm_recon.core.engine import ContractAnalyzer
from evm_recon.core.multicall import TRY_AGGREGATE_SELECTOR
from evm_recon.core.proxy import IMPLEMENTATION_SLOT
from evm_recon.errors import AnalysisError, InputError
from test_multicall import install_aggregator

NAME, DECIMALS, TRANSFER, UNKNOWN = "0x06fdde03", "0x313ce567", "0xa9059cbb", "0x12345678"
KNOWN = {
    NAME: "name()",
    DECIMALS: "decimals()",
    TRANSFER: "transfer(address,uint256)",
}


def known_lookup(selector):
    return KNOWN.get(selector, selector)


@pytest.fixture
def token(chain, token_address):
    chain.set_code(token_address, dispatcher_bytecode([NAME, DECIMALS, TRANSFER, UNKNOWN]))
    chain.on_call(token_address, NAME, encode(["string"], ["Token"]))
    chain.on_call(token_address, DECIMALS, encode(["uint8"], [18]))
    return token_address


def test_address_without_code(chain):
    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(addr("22"))

    assert report.is_contract is False
    assert report.signatures == {}
    assert chain.calls == []


def test_invalid_address_is_input_error(chain):
    with pytest.raises(InputError):
        ContractAnalyzer(chain).analyze("0x1234")


def test_lowercase_address_is_accepted(chain, token):
    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(token.lower())
    assert report.address == token


def test_full_pipeline(chain, token):
    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(token)

    assert report.is_contract is True
    assert report.selector_count == 4
    assert list(report.signatures) == [NAME, DECIMALS, TRANSFER, UNKNOWN]

    assert report.signatures[TRANSFER].is_callable is False
    assert report.signatures[UNKNOWN].is_callable is True
    assert report.signatures[UNKNOWN].signature is None

    assert set(report.outcomes) == {NAME, DECIMALS, UNKNOWN}
    assert report.decoded == {NAME: "Token", DECIMALS: "18"}
    assert report.outcomes[UNKNOWN].revert_reason == "execution reverted"

    called = {data for _, data, _ in chain.calls}
    assert TRANSFER not in called


def test_signature_cache_is_per_run(chain, token):
    counts = {}

    def counting_lookup(selector):
        counts[selector] = counts.get(selector, 0) + 1
        return known_lookup(selector)

    analyzer = ContractAnalyzer(chain, lookups=[counting_lookup])
    analyzer.analyze(token)
    analyzer.analyze(token)

    assert counts[NAME] == 2


def test_proxy_calls_target_implementation(chain):
    proxy, implementation = addr("aa"), addr("bb")
    chain.set_code(proxy, b"\x60\x80")
    chain.set_storage(proxy, IMPLEMENTATION_SLOT, word(implementation))
    chain.set_code(implementation, dispatcher_bytecode([DECIMALS]))
    chain.on_call(implementation, DECIMALS, encode(["uint256"], [6]))

    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(proxy, resolve_proxy=True)

    assert report.is_proxy is True
    assert report.address == proxy
    assert report.target_address == implementation
    assert report.decoded == {DECIMALS: "6"}
    assert {to for to, _, _ in chain.calls} == {implementation}


def test_proxy_resolution_off_analyzes_proxy_code(chain):
    proxy, implementation = addr("aa"), addr("bb")
    chain.set_code(proxy, b"\x60\x80")
    chain.set_storage(proxy, IMPLEMENTATION_SLOT, word(implementation))
    chain.set_code(implementation, dispatcher_bytecode([DECIMALS]))

    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(proxy)

    assert report.proxy is None
    assert report.selector_count == 0


def test_batch_path(chain, token):
    install_aggregator(chain)

    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(token, use_batch=True)

    assert report.decoded == {NAME: "Token", DECIMALS: "18"}
    assert report.outcomes[UNKNOWN].success is False
    assert report.outcomes[UNKNOWN].revert_reason == "execution reverted"


def test_batch_aggregator_failure_keeps_report(chain, token):
    chain.on_call(DEFAULT_MULTICALL3_ADDRESS, TRY_AGGREGATE_SELECTOR, ConnectionError("rpc unreachable"))

    report = ContractAnalyzer(chain, lookups=[known_lookup]).analyze(token, use_batch=True)

    assert report.signatures[NAME].signature == "name()"
    assert set(report.outcomes) == {NAME, DECIMALS, UNKNOWN}
    assert report.outcomes[DECIMALS].success is False
    assert report.outcomes[DECIMALS].revert_reason == "rpc unreachable"
    assert report.decoded == {}


@pytest.mark.asyncio
async def test_analyze_from_running_event_loop(chain, token):
    report = await ContractAnalyzer(chain, lookups=[known_lookup]).analyze_async(token)

    assert report.decoded == {NAME: "Token", DECIMALS: "18"}
    assert report.outcomes[UNKNOWN].success is False


@pytest.mark.asyncio
async def test_analyze_async_batch_path(chain, token):
    install_aggregator(chain)

    report = await ContractAnalyzer(chain, lookups=[known_lookup]).analyze_async(token, use_batch=True)

    assert report.decoded == {NAME: "Token", DECIMALS: "18"}


def test_failure_carries_partial_report(chain, token, monkeypatch):
    async def broken(self, calls, use_batch):
        raise RuntimeError("node went away")

    monkeypatch.setattr(ContractAnalyzer, "_invoke_async", broken)

    with pytest.raises(AnalysisError) as excinfo:
        ContractAnalyzer(chain, lookups=[known_lookup]).analyze(token)

    partial = excinfo.value.partial_report
    assert partial is not None
    assert partial.selector_count == 4
    assert partial.signatures[NAME].signature == "name()"
    assert partial.outcomes == {}
