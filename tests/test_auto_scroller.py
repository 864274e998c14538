"""Tests for the auto-scroll termination logic."""

import asyncio

from conftest import FakePage
from li_outreach.auto_scroller import AutoScroller, ScrollPhase, is_end_of_results
from li_outreach.models import ScrollStrategy, StopReason


def _scroller(page: FakePage) -> AutoScroller:
    return AutoScroller(page, jitter=0, substep_delay=0, settle=0)


def _scroll(page: FakePage, strategy=ScrollStrategy.jump, **kw):
    kw.setdefault("step_delay", 0)
    return asyncio.run(_scroller(page).scroll(strategy=strategy, **kw))


def test_stops_after_three_unchanged_heights():
    page = FakePage(heights=[1000, 2000, 3000], counts=[10, 20, 30])
    result = _scroll(page, max_steps=10)
    assert result.success
    assert result.reason == StopReason.height_stable
    assert result.steps_taken == 5
    assert result.records_visible == 30


def test_restores_scroll_position_to_top():
    page = FakePage(heights=[1000, 2000])
    _scroll(page, max_steps=10)
    assert page.positions[-1] == 0


def test_step_limit():
    page = FakePage(heights=list(range(1000, 20000, 1000)), counts=[5])
    result = _scroll(page, max_steps=3)
    assert result.success
    assert result.reason == StopReason.step_limit
    assert result.steps_taken == 3


def test_target_count_reached_before_scrolling():
    page = FakePage(heights=[1000, 2000], counts=[25])
    result = _scroll(page, max_steps=10, target_count=20)
    assert result.reason == StopReason.target_reached
    assert result.steps_taken == 0
    assert result.records_visible == 25


def test_target_count_reached_after_reveals():
    page = FakePage(heights=[1000, 2000, 3000, 4000], counts=[10, 20, 30])
    result = _scroll(page, max_steps=10, target_count=30)
    assert result.reason == StopReason.target_reached
    assert result.steps_taken == 2


def test_end_of_results_message():
    page = FakePage(
        heights=[1000, 2000, 3000, 4000],
        counts=[10, 20],
        texts=["results", "Jane Doe ... You've viewed all results for this search"],
    )
    result = _scroll(page, max_steps=10)
    assert result.reason == StopReason.end_of_results
    assert result.steps_taken == 1


def test_graduated_strategy_watches_container_count():
    page = FakePage(heights=[1000], counts=[10, 20, 20])
    scroller = _scroller(page)
    result = asyncio.run(scroller.scroll(max_steps=10, step_delay=0, strategy=ScrollStrategy.graduated))
    assert result.reason == StopReason.height_stable
    # one productive step, then three without new containers
    assert result.steps_taken == 4
    assert page.nudges == 4 * 5
    assert scroller.phase == ScrollPhase.done


def test_failure_reports_steps_and_zero_records():
    page = FakePage(heights=[1000, 2000, 3000, 4000], counts=[10, 20, 30], fail_text_after=2)
    result = _scroll(page, max_steps=10)
    assert not result.success
    assert result.reason == StopReason.error
    assert result.steps_taken == 2
    assert result.records_visible == 0
    assert "page detached" in result.error


def test_end_of_results_phrases():
    assert is_end_of_results("That's all the results for now")
    assert is_end_of_results("No more results")
    assert not is_end_of_results("Showing 10 results")
