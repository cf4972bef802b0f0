"""Report package — turns a validated link graph into output."""

from linkcheck.report.html import render_report, write_report
from linkcheck.report.summary import summarize

__all__ = ["render_report", "write_report", "summarize"]
