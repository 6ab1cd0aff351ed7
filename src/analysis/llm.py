"""Shared helpers for forced tool-use calls against Claude."""

from __future__ import annotations

import json
from typing import Any

from anthropic import Anthropic

from src.config import settings
from src.ingestion.errors import AnalysisParseFailure


def get_anthropic_client() -> Anthropic:
    """Create an Anthropic client bounded by the configured timeout.

    Retries are disabled: a failed analysis call degrades its stage instead.
    """
    return Anthropic(
        api_key=settings.anthropic_api_key,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
    )


def call_tool(
    client: Anthropic,
    *,
    model: str,
    system: str,
    prompt: str,
    tool: dict[str, Any],
    temperature: float = 0.2,
    max_tokens: int = 4096,
) -> dict[str, Any]:
    """Send ``prompt`` and force Claude to answer through ``tool``.

    Returns:
        The tool input as a dict. It has not been validated against the
        tool's schema; the service does not enforce it.

    Raises:
        AnalysisParseFailure: no matching tool call, or its input is not a JSON object.
    """
    response = client.messages.create(
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
        system=system,
        tools=[tool],
        tool_choice={"type": "tool", "name": tool["name"]},
        messages=[{"role": "user", "content": prompt}],
    )
    return _parse_tool_input(response, tool["name"])


def _parse_tool_input(response: Any, tool_name: str) -> dict[str, Any]:
    """Pull the input of the first ``tool_name`` tool_use block out of a response."""
    for block in response.content:
        if block.type != "tool_use":
            continue
        if block.name != tool_name:
            continue

        data = block.input
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as exc:
                raise AnalysisParseFailure(f"{tool_name} returned invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise AnalysisParseFailure(f"{tool_name} returned {type(data).__name__}, expected object")
        return data

    raise AnalysisParseFailure(f"Response contained no {tool_name} tool call")
