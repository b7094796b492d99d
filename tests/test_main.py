"""Tests for the CLI entry point."""
import json

import pytest
from semantic_kernel import Kernel

from sk_gov_labs import main as cli
from sk_gov_labs.errors import ConfigurationError
from sk_gov_labs.models import ChatMessage


class TestParser:
    def test_group_chat_defaults(self) -> None:
        args = cli.build_parser().parse_args(["group-chat", "Plan a hackathon"])

        assert args.command == "group-chat"
        assert args.manager == "keyword"
        assert args.max_responses == 6
        assert args.formats == ["md", "json", "html"]

    def test_memory_defaults(self) -> None:
        args = cli.build_parser().parse_args(["memory"])

        assert args.limit == 3
        assert args.query

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


async def test_check_command(settings) -> None:
    args = cli.build_parser().parse_args(["check"])

    assert await cli.run(args, settings) == 0


def test_invalid_max_responses() -> None:
    assert cli.main(["group-chat", "task", "--max-responses", "0"]) == 1


def test_missing_configuration(monkeypatch) -> None:
    def fail():
        raise ConfigurationError("Missing environment variables: AZURE_OPENAI_KEY")

    monkeypatch.setattr(cli, "load_settings", fail)

    assert cli.main(["check"]) == 1


def test_export_chat(tmp_path) -> None:
    messages = [ChatMessage(author="User", content="hi", role="user"), ChatMessage(author="Assistant", content="hello")]

    path = cli.export_chat(messages, str(tmp_path / "out" / "chat.json"))

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert [(m["author"], m["role"]) for m in data] == [("User", "user"), ("Assistant", "assistant")]


async def test_chat_builds_one_embedding_service(settings, embedding_service, monkeypatch) -> None:
    built = []
    kernel_kwargs = {}

    def fake_embedding_service(s):
        built.append(s)
        return embedding_service

    def fake_build_kernel(s, **kwargs):
        kernel_kwargs.update(kwargs)
        return Kernel()

    async def no_input(prompt):
        raise EOFError

    monkeypatch.setattr(cli, "build_embedding_service", fake_embedding_service)
    monkeypatch.setattr(cli, "build_kernel", fake_build_kernel)
    monkeypatch.setattr(cli.aioconsole, "ainput", no_input)

    assert await cli.run(cli.build_parser().parse_args(["chat"]), settings) == 0
    assert len(built) == 1
    assert not kernel_kwargs.get("embeddings", False)
    assert "memory" in kernel_kwargs["plugins"]
