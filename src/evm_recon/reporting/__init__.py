"""Report formatting and output writers."""

from .formatter import ERC20_SELECTORS, render_report, report_to_dict, save_json_results

__all__ = ["ERC20_SELECTORS", "render_report", "report_to_dict", "save_json_results"]
