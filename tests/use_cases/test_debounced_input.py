"""
Tests for DebouncedInputBuffer.

Timings are scaled down 10x from the product values (quiet period 40ms
instead of 400ms) to keep the suite fast.
"""

from __future__ import annotations

import asyncio

import pytest

from catalog_browser.use_cases.debounced_input import DebouncedInputBuffer


def test_burst_of_keystrokes_commits_once_with_last_value() -> None:
    commits: list[tuple[str, float]] = []

    async def run() -> float:
        loop = asyncio.get_running_loop()
        started = loop.time()
        buffer = DebouncedInputBuffer(
            lambda text: commits.append((text, loop.time() - started)), quiet_ms=40
        )

        # Keystrokes at t=0, 10, 20, 25ms
        buffer.on_raw_input("b")
        await asyncio.sleep(0.010)
        buffer.on_raw_input("ba")
        await asyncio.sleep(0.010)
        buffer.on_raw_input("bat")
        await asyncio.sleep(0.005)
        last_keystroke = loop.time() - started
        buffer.on_raw_input("batm")

        await asyncio.sleep(0.15)
        return last_keystroke

    last_keystroke = asyncio.run(run())

    assert len(commits) == 1
    text, fired_at = commits[0]
    assert text == "batm"
    assert fired_at >= last_keystroke + 0.039


def test_nothing_commits_before_quiet_period_ends() -> None:
    commits: list[str] = []

    async def run() -> bool:
        buffer = DebouncedInputBuffer(commits.append, quiet_ms=100)
        buffer.on_raw_input("alien")
        await asyncio.sleep(0.02)
        pending = buffer.has_pending
        buffer.cancel()
        return pending

    assert asyncio.run(run()) is True
    assert commits == []


def test_force_commit_is_immediate_and_cancels_pending() -> None:
    commits: list[str] = []

    async def run() -> None:
        buffer = DebouncedInputBuffer(commits.append, quiet_ms=30)
        buffer.on_raw_input("ali")
        buffer.force_commit("alien")
        assert commits == ["alien"]
        assert not buffer.has_pending
        await asyncio.sleep(0.08)

    asyncio.run(run())

    assert commits == ["alien"]


def test_input_after_commit_starts_a_new_quiet_period() -> None:
    commits: list[str] = []

    async def run() -> None:
        buffer = DebouncedInputBuffer(commits.append, quiet_ms=20)
        buffer.on_raw_input("alien")
        await asyncio.sleep(0.06)
        buffer.on_raw_input("aliens")
        assert buffer.pending_value == "aliens"
        await asyncio.sleep(0.06)

    asyncio.run(run())

    assert commits == ["alien", "aliens"]


def test_negative_quiet_period_is_rejected() -> None:
    with pytest.raises(ValueError):
        DebouncedInputBuffer(lambda text: None, quiet_ms=-1)
