"""Decisions for divergent local and remote quote sets.

A resolver is any callable taking (local, candidates) and returning True to
overwrite local quotes with the remote candidates. It may be a coroutine.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from ..exceptions import ConfigurationError
from ..quotes.models import Quote

logger = logging.getLogger(__name__)

Resolver = Callable[[list[Quote], list[Quote]], bool | Awaitable[bool]]

RESOLUTION_POLICIES = ("prompt", "accept", "decline")


def always_accept(local: list[Quote], candidates: list[Quote]) -> bool:
    return True


def always_decline(local: list[Quote], candidates: list[Quote]) -> bool:
    return False


class ConsolePrompt:
    """Ask the user on the terminal whether to overwrite local quotes.

    The question is read in a worker thread. Stopping the engine while a
    question is pending cannot interrupt that read, so interpreter shutdown
    waits until the user answers or closes stdin.
    """

    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func

    def _ask(self, local: list[Quote], candidates: list[Quote]) -> bool:
        question = (
            f"Server has {len(candidates)} quotes, you have {len(local)} locally. "
            "Overwrite local quotes with server data? [y/N] "
        )
        try:
            answer = self._input(question)
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")

    async def __call__(self, local: list[Quote], candidates: list[Quote]) -> bool:
        # Block the sync cycle, not the event loop
        return await asyncio.to_thread(self._ask, local, candidates)


async def decide(resolver: Resolver, local: list[Quote], candidates: list[Quote]) -> bool:
    """Run a resolver, awaiting it if needed."""
    decision = resolver(local, candidates)
    if inspect.isawaitable(decision):
        decision = await decision
    return bool(decision)


def resolver_for_policy(policy: str) -> Resolver:
    """Build a resolver from a configured policy name.

    Raises:
        ConfigurationError: If the policy name is unknown.
    """
    if policy == "accept":
        return always_accept
    if policy == "decline":
        return always_decline
    if policy == "prompt":
        return ConsolePrompt()
    raise ConfigurationError(
        f"Unknown resolution policy {policy!r}, expected one of {RESOLUTION_POLICIES}"
    )
