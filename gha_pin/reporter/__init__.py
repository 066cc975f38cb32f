from .console_reporter import report_console
from .json_reporter import report_json
from .markdown_reporter import report_markdown

__all__ = ["report_console", "report_json", "report_markdown"]
