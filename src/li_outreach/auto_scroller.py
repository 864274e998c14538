"""Scroll-driven pagination for LinkedIn's infinite result lists."""

from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum

from .config import (
    MAX_SCROLL_STEPS,
    NO_CHANGE_LIMIT,
    SCROLL_DELAY,
    SCROLL_JITTER,
    SCROLL_SETTLE,
    SCROLL_STEP_PX,
    SCROLL_SUBSTEP_DELAY,
    SCROLL_SUBSTEPS,
)
from .models import RevealResult, ScrollStrategy, StopReason
from .page import PageDriver, count_containers

logger = logging.getLogger(__name__)

# Case-sensitive English phrases; other locales fall through to the
# no-change heuristic.
END_OF_RESULTS_MESSAGES = [
    "You've viewed all",
    "No more results",
    "End of results",
    "That's all the results",
    "You've seen all",
]


class ScrollPhase(str, Enum):
    scrolling = "scrolling"
    stabilizing = "stabilizing"
    done = "done"


def is_end_of_results(text: str) -> bool:
    return any(message in text for message in END_OF_RESULTS_MESSAGES)


class AutoScroller:
    """Reveals more result containers by scrolling until the feed runs dry.

    ``jump`` scrolls straight to the bottom and watches page height;
    ``graduated`` scrolls in small steps and watches the container count.
    Both stop on target count, an end-of-results message, three steps
    without progress, or the step limit.
    """

    def __init__(
        self,
        page: PageDriver,
        *,
        jitter: float = SCROLL_JITTER,
        step_px: int = SCROLL_STEP_PX,
        substeps: int = SCROLL_SUBSTEPS,
        substep_delay: float = SCROLL_SUBSTEP_DELAY,
        settle: float = SCROLL_SETTLE,
        no_change_limit: int = NO_CHANGE_LIMIT,
        log: logging.Logger | None = None,
    ) -> None:
        self.page = page
        self.jitter = jitter
        self.step_px = step_px
        self.substeps = substeps
        self.substep_delay = substep_delay
        self.settle = settle
        self.no_change_limit = no_change_limit
        self.phase = ScrollPhase.scrolling
        self._log = log or logger

    async def _measure(self, strategy: ScrollStrategy) -> int:
        if strategy is ScrollStrategy.jump:
            return await self.page.scroll_height()
        return await count_containers(self.page)

    async def _advance(self, strategy: ScrollStrategy) -> None:
        if strategy is ScrollStrategy.jump:
            await self.page.scroll_to(await self.page.scroll_height())
            return
        for _ in range(self.substeps):
            await self.page.scroll_by(self.step_px)
            await asyncio.sleep(self.substep_delay)

    async def _wait(self, delay: float) -> None:
        await asyncio.sleep(delay + random.uniform(0, self.jitter))

    async def scroll(
        self,
        max_steps: int = MAX_SCROLL_STEPS,
        step_delay: float = SCROLL_DELAY,
        target_count: int | None = None,
        strategy: ScrollStrategy = ScrollStrategy.graduated,
    ) -> RevealResult:
        self._log.info(
            "Starting %s scroll (max %d steps, delay %.1fs)", strategy.value, max_steps, step_delay
        )
        steps = 0
        no_change = 0
        self.phase = ScrollPhase.scrolling
        try:
            while True:
                if steps >= max_steps:
                    reason = StopReason.step_limit
                    break

                visible = await count_containers(self.page)
                if target_count and visible >= target_count:
                    self._log.info("Target count %d reached", target_count)
                    reason = StopReason.target_reached
                    break

                if is_end_of_results(await self.page.visible_text()):
                    self._log.info("Detected end of results message")
                    reason = StopReason.end_of_results
                    break

                before = await self._measure(strategy)
                await self._advance(strategy)
                await self._wait(step_delay)
                after = await self._measure(strategy)
                steps += 1

                if after == before:
                    no_change += 1
                    self.phase = ScrollPhase.stabilizing
                    self._log.info("No new content after step %d (%d/%d)", steps, no_change, self.no_change_limit)
                    if no_change >= self.no_change_limit:
                        reason = StopReason.height_stable
                        break
                else:
                    no_change = 0
                    self.phase = ScrollPhase.scrolling
                    self._log.info("Step %d: %d -> %d", steps, before, after)

            self.phase = ScrollPhase.done
            await self.page.scroll_to(0)
            await asyncio.sleep(self.settle)
            final = await count_containers(self.page)
        except Exception as exc:
            self.phase = ScrollPhase.done
            self._log.error("Auto-scroll failed", exc_info=True)
            return RevealResult(
                success=False,
                records_visible=0,
                steps_taken=steps,
                reason=StopReason.error,
                error=str(exc),
            )

        self._log.info("Scroll complete (%s): %d steps, %d containers", reason.value, steps, final)
        return RevealResult(success=True, records_visible=final, steps_taken=steps, reason=reason)
