"""Tests for lock-protected dispatch state transitions."""

from __future__ import annotations

import asyncio
import unittest

from simplechat.state import DispatchState, StateManager


class StateManagerTests(unittest.IsolatedAsyncioTestCase):
    """Validate the single-flight state machine."""

    async def test_transition_if_enforces_expected_state(self) -> None:
        manager = StateManager()
        changed = await manager.transition_if(DispatchState.SENDING, DispatchState.FAILED)
        self.assertFalse(changed)
        self.assertEqual(manager.state, DispatchState.IDLE)

        changed = await manager.transition_if(DispatchState.IDLE, DispatchState.SENDING)
        self.assertTrue(changed)
        self.assertEqual(manager.state, DispatchState.SENDING)

    async def test_transition_to_walks_the_send_cycle(self) -> None:
        manager = StateManager()
        for state in (DispatchState.SENDING, DispatchState.DELIVERED, DispatchState.IDLE):
            self.assertEqual(await manager.transition_to(state), state)
            self.assertEqual(manager.state, state)

    async def test_lock_prevents_double_send_entry(self) -> None:
        manager = StateManager()

        async def try_enter_sending() -> bool:
            await asyncio.sleep(0)
            return await manager.transition_if(DispatchState.IDLE, DispatchState.SENDING)

        results = await asyncio.gather(*(try_enter_sending() for _ in range(10)))
        self.assertEqual(sum(1 for result in results if result), 1)
        self.assertEqual(manager.state, DispatchState.SENDING)


if __name__ == "__main__":
    unittest.main()
