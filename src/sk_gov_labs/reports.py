"""
Report writers for lab runs.

A run can be saved as Markdown, JSON and/or HTML. Everything taken from model
output is HTML-escaped before it reaches an HTML file.
"""
import asyncio
import html
import json
import os
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .console import log_success, log_warning
from .models import OrchestrationResult
from .thread import ConversationThread

REPORT_FORMATS = ("md", "json", "html")

_HTML_HEADER = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f4f6f8; color: #333; margin: 20px; }}
    .log-entry {{ background-color: #fff; border: 1px solid #d1d9e6; border-radius: 8px; padding: 20px; margin-bottom: 20px; box-shadow: 0 2px 5px rgba(0,0,0,0.05); }}
    .log-entry h3 {{ color: #2c3e50; margin-bottom: 15px; }}
    .log-entry p {{ margin: 8px 0; line-height: 1.6; white-space: pre-wrap; }}
    .label {{ font-weight: bold; color: #34495e; }}
    .failed {{ border-color: #e74c3c; }}
  </style>
</head>
<body>
"""

_HTML_FOOTER = "\n</body>\n</html>\n"


def _ensure_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def _esc(text: Optional[str]) -> str:
    return html.escape(text or "", quote=True)


def render_markdown(result: OrchestrationResult, thread: Optional[ConversationThread] = None) -> str:
    status = "success" if result.success else "failed"
    lines = [
        f"# Lab run {result.id}",
        "",
        f"- **Task:** {result.task}",
        f"- **Status:** {status}",
        f"- **Started:** {result.started_at.isoformat()}",
    ]
    if result.finished_at:
        lines.append(f"- **Finished:** {result.finished_at.isoformat()}")
    lines += ["", "## Steps", ""]
    for i, step in enumerate(result.steps, start=1):
        mark = "✅" if step.success else "❌"
        lines.append(f"### {i}. {step.agent_name} {mark}")
        lines.append("")
        if step.success:
            lines.append(step.output)
        else:
            lines.append(f"_Error: {step.error}_")
        lines.append("")
    if thread is not None and len(thread):
        lines += ["## Transcript", ""]
        for m in thread:
            lines.append(f"**{m.author}** ({m.timestamp.strftime('%H:%M:%S')}): {m.content}")
            lines.append("")
    lines += ["## Final output", "", result.final_output or "_(none)_", ""]
    return "\n".join(lines)


def render_html(result: OrchestrationResult, thread: Optional[ConversationThread] = None) -> str:
    parts = [_HTML_HEADER.format(title=_esc(f"Lab run {result.id}"))]
    parts.append(
        '<div class="log-entry">\n'
        f"  <h3>Task</h3>\n  <p>{_esc(result.task)}</p>\n"
        f'  <p><span class="label">Status:</span> {"success" if result.success else "failed"}</p>\n'
        "</div>\n"
    )
    for i, step in enumerate(result.steps, start=1):
        css = "log-entry" if step.success else "log-entry failed"
        body = _esc(step.output) if step.success else f"Error: {_esc(step.error)}"
        parts.append(
            f'<div class="{css}">\n'
            f"  <h3>{i}. {_esc(step.agent_name)}</h3>\n"
            f"  <p>{body}</p>\n"
            "</div>\n"
        )
    if thread is not None and len(thread):
        rows = "\n".join(
            f'  <p><span class="label">{_esc(m.author)}:</span> {_esc(m.content)}</p>' for m in thread
        )
        parts.append(f'<div class="log-entry">\n  <h3>Transcript</h3>\n{rows}\n</div>\n')
    parts.append(
        '<div class="log-entry">\n'
        f"  <h3>Final output</h3>\n  <p>{_esc(result.final_output)}</p>\n"
        "</div>\n"
    )
    parts.append(_HTML_FOOTER)
    return "".join(parts)


def write_markdown_report(result: OrchestrationResult, path: str, thread: Optional[ConversationThread] = None) -> str:
    _ensure_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_markdown(result, thread))
    return path


def write_json_report(result: OrchestrationResult, path: str, thread: Optional[ConversationThread] = None) -> str:
    data = result.to_dict()
    if thread is not None:
        data["thread"] = [m.to_dict() for m in thread]
    _ensure_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return path


def write_html_report(result: OrchestrationResult, path: str, thread: Optional[ConversationThread] = None) -> str:
    _ensure_dir(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_html(result, thread))
    return path


_WRITERS = {
    "md": write_markdown_report,
    "json": write_json_report,
    "html": write_html_report,
}


def write_reports(
    result: OrchestrationResult,
    output_dir: str,
    *,
    thread: Optional[ConversationThread] = None,
    formats: Iterable[str] = REPORT_FORMATS,
    prefix: str = "run",
) -> Dict[str, str]:
    """Write one file per format into `output_dir`; returns format -> path."""
    formats = list(formats)
    unknown = [f for f in formats if f not in _WRITERS]
    if unknown:
        raise ValueError(f"Unknown report format(s): {', '.join(unknown)}")

    os.makedirs(output_dir, exist_ok=True)
    written = {}
    for fmt in formats:
        path = os.path.join(output_dir, f"{prefix}_{result.id}.{fmt}")
        written[fmt] = _WRITERS[fmt](result, path, thread)
        log_success(f"🧾 Report written to {path}")
    return written


class HtmlInteractionLog:
    """Append-only HTML log for the interactive chat lab.

    Writes are serialised with an asyncio lock and done in a worker thread.
    `close()` appends the footer exactly once.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = asyncio.Lock()
        self._closed = False
        self.entries = 0

    def _write_text(self, text: str) -> None:
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(text)

    def _needs_header(self) -> bool:
        return not os.path.exists(self.path) or os.path.getsize(self.path) == 0

    async def log_interaction(self, user_message: str, response: str, *, tools: Optional[List[str]] = None) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        tools_line = ""
        if tools:
            tools_line = f'  <p><span class="label">Tools:</span> {_esc(", ".join(tools))}</p>\n'
        entry = (
            '\n<div class="log-entry">\n'
            f"  <h3>Interaction {timestamp}</h3>\n"
            f'  <p><span class="label">User:</span> {_esc(user_message)}</p>\n'
            f'  <p><span class="label">Assistant:</span> {_esc(response)}</p>\n'
            f"{tools_line}"
            "</div>\n"
        )
        async with self._lock:
            if self._closed:
                raise RuntimeError("HTML log is already closed")
            _ensure_dir(self.path)
            if self._needs_header():
                await asyncio.to_thread(self._write_text, _HTML_HEADER.format(title="Interaction Log"))
            await asyncio.to_thread(self._write_text, entry)
            self.entries += 1

    async def close(self) -> None:
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._needs_header():
                log_warning("HTML log is empty; nothing to close.")
                return
            await asyncio.to_thread(self._write_text, _HTML_FOOTER)
