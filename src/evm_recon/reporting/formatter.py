"""Plain-text and JSON rendering of an AnalysisReport."""

import json
import logging
from pathlib import Path
from typing import List

from ..models import AnalysisReport, FunctionReport

logger = logging.getLogger(__name__)

# name(), symbol(), decimals(), totalSupply()
ERC20_SELECTORS = ["0x06fdde03", "0x95d89b41", "0x313ce567", "0x18160ddd"]


def _format_function(func: FunctionReport) -> List[str]:
    lines = [f"{func.selector} {func.signature or 'unknown'}"]
    if func.decoded:
        lines.append(f"  -> {func.decoded}")
    elif func.revert:
        lines.append(f"  -> {func.revert}")
    lines.append("")
    return lines


def render_report(report: AnalysisReport) -> str:
    """
    Render a report for terminal output.

    Layout: header, statistics, callable functions (ERC-20 metadata first),
    then functions that require arguments.
    """
    lines = []
    if not report.is_contract:
        lines.append(f"Contract {report.target_address} was not found (no code at address)")
        return "\n".join(lines)

    if report.is_proxy:
        lines.append(f"Proxy Contract: {report.address}")
        lines.append(f"Implementation: {report.target_address}")
    else:
        lines.append(f"Contract: {report.address}")
    lines.append("")

    lines.append("Statistics:")
    lines.append(f"Bytecode size: {report.bytecode_size} bytes")
    lines.append(f"Total selectors: {report.selector_count}")
    lines.append("")

    callable_functions = {f.selector: f for f in report.callable_functions}
    for selector in ERC20_SELECTORS:
        if selector in callable_functions:
            lines.extend(_format_function(callable_functions[selector]))
    for selector, func in callable_functions.items():
        if selector not in ERC20_SELECTORS:
            lines.extend(_format_function(func))

    for func in report.non_callable_functions:
        lines.append(f"{func.selector} {func.signature or 'unknown'}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


def report_to_dict(report: AnalysisReport) -> dict:
    data = report.model_dump()
    data["is_proxy"] = report.is_proxy
    data["functions"] = [f.model_dump() for f in report.callable_functions + report.non_callable_functions]
    return data


def save_json_results(report: AnalysisReport, json_output: Path):
    """
    Save an analysis report to a JSON file.

    Args:
        report: Analysis report
        json_output: Path to JSON output file
    """
    logger.info(f"Saving JSON results to {json_output}")
    with open(json_output, 'w') as f:
        json.dump(report_to_dict(report), f, indent=2)
