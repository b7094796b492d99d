"""
Semantic Kernel labs (CLI)

Runnable versions of the lab programs against Azure OpenAI in Azure Government:

- `check`       validate the `.env` configuration
- `chat`        interactive assistant with plugins and invocation filters
- `sequential`  Writer -> Reviewer pipeline with per-step results
- `group-chat`  multi-agent group chat driven by a sample manager
- `memory`      store a few facts as embeddings and search them

Every command that produces output writes Markdown/JSON/HTML reports under
`LAB_OUTPUT_DIR`.
"""
import argparse
import asyncio
import json
import os
import sys
import uuid
from datetime import datetime
from typing import List, Optional

import aioconsole
from semantic_kernel.agents import ChatHistoryAgentThread
from tavily import TavilyClient

from .agents import build_chat_agent, build_lab_agents, get_response
from .config import LabSettings, load_settings
from .console import log_error, log_info, log_note, log_rule, log_section, log_success, log_warning
from .errors import LabError
from .filters import TimingFilter
from .kernel import build_embedding_service, build_kernel
from .managers import KeywordTerminationManager, SequentialTurnManager
from .memory import SemanticMemoryStore
from .models import ChatMessage
from .orchestration import SequentialOrchestrator, run_group_chat
from .plugins import SearchOnline, default_plugins
from .reports import REPORT_FORMATS, HtmlInteractionLog, write_reports
from .thread import ConversationThread

EXIT_WORDS = {"exit", "quit", "end"}

SAMPLE_FACTS = [
    "Azure Government regions are physically isolated from commercial Azure.",
    "Azure OpenAI in Azure Government uses endpoints ending in openai.azure.us.",
    "Semantic Kernel plugins expose Python methods to the model as functions.",
    "A group chat manager decides which agent speaks next and when the chat ends.",
    "Function invocation filters run before and after every kernel function call.",
]


def _session_id() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S-") + uuid.uuid4().hex[:8]


def export_chat(messages: List[ChatMessage], path: str) -> str:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([m.to_dict() for m in messages], f, ensure_ascii=False, indent=2)
    return path


# =========================
# Commands
# =========================
async def cmd_check(settings: LabSettings, args: argparse.Namespace) -> int:
    log_section("⚙️ Configuration", json.dumps(settings.redacted(), indent=2))
    if settings.is_government:
        log_success("Endpoint is an Azure Government host.")
    else:
        log_warning("Endpoint is not an Azure Government host.")
    return 0


async def cmd_chat(settings: LabSettings, args: argparse.Namespace) -> int:
    session_id = _session_id()
    timings = TimingFilter()
    store = SemanticMemoryStore(build_embedding_service(settings))
    kernel = build_kernel(
        settings,
        plugins=default_plugins(settings.tavily_api_key, store=store),
        timing_filter=timings,
    )
    agent = build_chat_agent(kernel)
    thread = ChatHistoryAgentThread()
    html_log = HtmlInteractionLog(os.path.join(settings.output_dir, f"chat_{session_id}.html"))
    messages: List[ChatMessage] = []

    log_success(f"🚀 Assistant started (session {session_id}). Type your question (or 'exit' to quit).")
    try:
        while True:
            try:
                user_message = await aioconsole.ainput("🧑 You: ")
            except (EOFError, KeyboardInterrupt):
                break
            if user_message.strip().lower() in EXIT_WORDS:
                break
            if not user_message.strip():
                continue

            log_rule("New Interaction")
            before = {name: len(v) for name, v in timings.timings.items()}
            try:
                answer = await asyncio.wait_for(
                    get_response(agent, user_message, thread=thread), timeout=settings.timeout_seconds
                )
            except asyncio.TimeoutError:
                log_warning(f"⏱️ No answer within {settings.timeout_seconds:g}s.")
                continue
            except LabError as e:
                log_error(str(e))
                continue

            tools = [name for name, v in timings.timings.items() if len(v) > before.get(name, 0)]
            messages.append(ChatMessage(author="User", content=user_message, role="user"))
            messages.append(ChatMessage(author=agent.name, content=answer))
            log_section("✅ Assistant", answer, markdown=True)
            await html_log.log_interaction(user_message, answer, tools=tools)
    finally:
        await html_log.close()
        if messages:
            path = export_chat(messages, os.path.join(settings.output_dir, f"chat_{session_id}.json"))
            log_note(f"📁 Chat exported to {path}")
        if timings.timings:
            log_section("⏱️ Function timings", json.dumps(timings.summary(), indent=2))
        log_info("👋 Bye!")
    return 0


async def cmd_sequential(settings: LabSettings, args: argparse.Namespace) -> int:
    kernel = build_kernel(settings)
    agents = build_lab_agents(kernel)
    orchestrator = SequentialOrchestrator(
        [agents["writer"], agents["reviewer"]], timeout=settings.timeout_seconds
    )
    thread = ConversationThread()
    result = await orchestrator.run(args.task, thread=thread)
    write_reports(result, settings.output_dir, thread=thread, formats=args.formats, prefix="sequential")
    if not result.success:
        for step in result.failed_steps:
            log_error(f"{step.agent_name}: {step.error}")
        return 1
    log_section("🏁 Final output", result.final_output, markdown=True)
    return 0


def _research_plugins(settings: LabSettings) -> Optional[List[SearchOnline]]:
    if not settings.tavily_api_key:
        return None
    return [SearchOnline(TavilyClient(api_key=settings.tavily_api_key))]


async def cmd_group_chat(settings: LabSettings, args: argparse.Namespace) -> int:
    kernel = build_kernel(settings)
    agents = build_lab_agents(kernel, research_plugins=_research_plugins(settings))
    members = [agents["researcher"], agents["writer"], agents["reviewer"]]
    if args.manager == "keyword":
        manager = KeywordTerminationManager(max_responses=args.max_responses, max_rounds=args.max_responses)
    else:
        manager = SequentialTurnManager(max_responses=args.max_responses, max_rounds=args.max_responses)

    thread = ConversationThread()
    result = await run_group_chat(
        members, manager, args.task, timeout=settings.timeout_seconds * args.max_responses, thread=thread
    )
    write_reports(result, settings.output_dir, thread=thread, formats=args.formats, prefix="group_chat")
    log_section("🏁 Final output", result.final_output or "(none)", markdown=True)
    return 0 if result.success else 1


async def cmd_memory(settings: LabSettings, args: argparse.Namespace) -> int:
    store = SemanticMemoryStore(build_embedding_service(settings))
    await store.save_many("facts", SAMPLE_FACTS)
    log_success(f"🧠 Stored {store.count('facts')} facts.")

    matches = await store.search("facts", args.query, limit=args.limit, min_relevance=args.min_relevance)
    if not matches:
        log_warning("No stored fact is relevant enough.")
    else:
        body = "\n".join(f"- ({m.relevance:.3f}) {m.record.text}" for m in matches)
        log_section(f"🔎 Matches for: {args.query}", body, markdown=True)

    path = store.export_json(os.path.join(settings.output_dir, "memory_facts.json"))
    log_note(f"📁 Memory exported to {path}")
    return 0


COMMANDS = {
    "check": cmd_check,
    "chat": cmd_chat,
    "sequential": cmd_sequential,
    "group-chat": cmd_group_chat,
    "memory": cmd_memory,
}


# =========================
# Entry point
# =========================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sk-gov-labs", description="Semantic Kernel labs on Azure Government.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("check", help="validate configuration")
    sub.add_parser("chat", help="interactive assistant with plugins and filters")

    seq = sub.add_parser("sequential", help="Writer -> Reviewer pipeline")
    seq.add_argument("task")

    group = sub.add_parser("group-chat", help="multi-agent group chat")
    group.add_argument("task")
    group.add_argument("--manager", choices=["keyword", "turns"], default="keyword")
    group.add_argument("--max-responses", type=int, default=6)

    for p in (seq, group):
        p.add_argument("--formats", nargs="+", choices=REPORT_FORMATS, default=list(REPORT_FORMATS))

    mem = sub.add_parser("memory", help="semantic memory search demo")
    mem.add_argument("query", nargs="?", default="How do I reach Azure OpenAI in the government cloud?")
    mem.add_argument("--limit", type=int, default=3)
    mem.add_argument("--min-relevance", type=float, default=0.0)
    return parser


async def run(args: argparse.Namespace, settings: Optional[LabSettings] = None) -> int:
    settings = settings or load_settings()
    return await COMMANDS[args.command](settings, args)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "max_responses", 1) < 1:
        log_error("--max-responses must be at least 1")
        return 1
    try:
        return asyncio.run(run(args))
    except LabError as e:
        log_error(str(e))
        return 1
    except KeyboardInterrupt:
        log_info("👋 Shutting down...")
        return 130


if __name__ == "__main__":
    sys.exit(main())
