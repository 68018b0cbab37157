"""Structured models passed between the analysis pipeline stages."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import ZERO_ADDRESS


class Instruction(BaseModel):
    """One decoded opcode; `immediate` is set only for PUSH1..PUSH32."""
    model_config = ConfigDict(frozen=True)
    offset: int
    opcode: int
    mnemonic: str
    immediate: Optional[bytes] = None


class SignatureInfo(BaseModel):
    model_config = ConfigDict(frozen=True)
    selector: str
    signature: Optional[str] = None
    function_name: Optional[str] = None
    is_callable: bool = True


class ProxyResolution(BaseModel):
    model_config = ConfigDict(frozen=True)
    proxy_address: str
    is_proxy: bool = False
    implementation_address: str = ZERO_ADDRESS
    implementation_bytecode: str = "0x"
    via_beacon: bool = False


class CallRequest(BaseModel):
    model_config = ConfigDict(frozen=True)
    target: str
    calldata: str


class CallOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)
    selector: str
    success: bool
    return_data: str = "0x"
    revert_reason: Optional[str] = None


class BatchCallResult(BaseModel):
    """Aggregator result entry: no revert text is available on this path."""
    model_config = ConfigDict(frozen=True)
    success: bool
    return_data: str = "0x"


class NetworkCheck(BaseModel):
    model_config = ConfigDict(frozen=True)
    network: str
    rpc_url: str
    is_contract: bool = False
    is_proxy: bool = False
    implementation: str = ZERO_ADDRESS


class FunctionReport(BaseModel):
    model_config = ConfigDict(frozen=True)
    selector: str
    signature: Optional[str] = None
    function_name: Optional[str] = None
    is_callable: bool = True
    response: Optional[str] = None
    decoded: Optional[str] = None
    revert: Optional[str] = None


class AnalysisReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    target_address: str
    is_contract: bool = True
    bytecode_size: int = 0
    selector_count: int = 0
    proxy: Optional[ProxyResolution] = None
    signatures: Dict[str, SignatureInfo] = Field(default_factory=dict)
    outcomes: Dict[str, CallOutcome] = Field(default_factory=dict)
    decoded: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_proxy(self) -> bool:
        return bool(self.proxy and self.proxy.is_proxy)

    def function_report(self, selector: str) -> FunctionReport:
        info = self.signatures.get(selector) or SignatureInfo(selector=selector)
        outcome = self.outcomes.get(selector)
        return FunctionReport(
            selector=selector,
            signature=info.signature,
            function_name=info.function_name,
            is_callable=info.is_callable,
            response=outcome.return_data if outcome and outcome.success else None,
            decoded=self.decoded.get(selector),
            revert=outcome.revert_reason if outcome and not outcome.success else None,
        )

    @property
    def callable_functions(self) -> List[FunctionReport]:
        return [self.function_report(s) for s, info in self.signatures.items() if info.is_callable]

    @property
    def non_callable_functions(self) -> List[FunctionReport]:
        return [self.function_report(s) for s, info in self.signatures.items() if not info.is_callable]
