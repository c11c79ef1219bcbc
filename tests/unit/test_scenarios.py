"""Tests for demo scenarios and the scenario player."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from workflow_pricing.core.catalog import default_catalog
from workflow_pricing.core.conversation import QUESTION_FLOW, get_next_question, to_workload
from workflow_pricing.core.cost_engine import complete_breakdown
from workflow_pricing.core.models import WORKING_DAYS_PER_MONTH
from workflow_pricing.core.scenarios import (
    DEMO_SCENARIOS,
    OPENING_PROMPT,
    ScenarioPlayer,
    get_scenario_by_id,
    scenario_state,
)


class TestScenarioData:
    """Tests for the bundled scenarios."""

    def test_scenario_ids_unique(self):
        ids = [scenario.id for scenario in DEMO_SCENARIOS]
        assert len(ids) == len(set(ids)) == 5

    def test_lookup(self):
        assert get_scenario_by_id("healthcare-triage").industry == "Healthcare"
        assert get_scenario_by_id("missing") is None

    @pytest.mark.parametrize("scenario", DEMO_SCENARIOS, ids=lambda s: s.id)
    def test_scenarios_open_with_prompt_and_alternate(self, scenario):
        assert scenario.conversation[0].role == "ai"
        assert scenario.conversation[0].message == OPENING_PROMPT
        assert {message.role for message in scenario.conversation} == {"ai", "user"}

    @pytest.mark.parametrize("scenario", DEMO_SCENARIOS, ids=lambda s: s.id)
    def test_scenarios_price_with_default_catalog(self, scenario):
        state = scenario_state(scenario)
        assert get_next_question(state) is None
        assert state.extracted_data.complexity_tier in ("Low", "Medium", "High")

        breakdown = complete_breakdown(
            to_workload(state.extracted_data, "Claude 3.5 Sonnet"), default_catalog()
        )
        assert breakdown.monthly_credits > 0

    def test_scenario_state(self):
        state = scenario_state(get_scenario_by_id("ecommerce-support"))
        assert state.current_step == len(QUESTION_FLOW)
        assert state.responses == {"scenario_id": "ecommerce-support"}
        assert state.extracted_data.channels == ("email", "chat")
        assert state.extracted_data.emails_per_month == 5000
        assert state.extracted_data.chats_per_month == 3000

    def test_trigger_counts_follow_channel_volumes(self):
        ecommerce = scenario_state(get_scenario_by_id("ecommerce-support")).extracted_data
        legal = scenario_state(get_scenario_by_id("legal-contract")).extracted_data

        assert ecommerce.workflow_triggers_per_day == 0
        assert legal.workflow_triggers_per_day == legal.docs_per_month // WORKING_DAYS_PER_MONTH == 9

    def test_ecommerce_estimate(self):
        state = scenario_state(get_scenario_by_id("ecommerce-support"))
        workload = to_workload(state.extracted_data, "Claude 3.5 Sonnet")
        breakdown = complete_breakdown(workload, default_catalog())

        assert workload.transactions_per_month == 8000
        assert breakdown.token_cost == pytest.approx(0.0084)
        assert breakdown.token_cost_with_handling_fee == pytest.approx(0.0105)
        assert breakdown.inter_agent_cost == pytest.approx(0.0002)
        assert breakdown.feature_cost == pytest.approx(3.185)
        assert breakdown.setup_costs == pytest.approx(1.4)

    def test_summary_dict(self):
        summary = get_scenario_by_id("legal-contract").summary_dict()
        assert summary["id"] == "legal-contract"
        assert summary["messages"] == len(get_scenario_by_id("legal-contract").conversation)


class TestScenarioPlayer:
    """Tests for scenario replay."""

    @pytest.mark.asyncio
    async def test_play_emits_every_message_in_order(self):
        scenario = get_scenario_by_id("ecommerce-support")
        received = []
        player = ScenarioPlayer(speed=0)

        state = await player.play(scenario, on_message=received.append)

        assert received == list(scenario.conversation)
        assert state == scenario_state(scenario)

    @pytest.mark.asyncio
    async def test_play_scales_delays(self):
        scenario = get_scenario_by_id("ecommerce-support")
        sleep = AsyncMock()
        player = ScenarioPlayer(speed=0.5, sleep=sleep)

        await player.play(scenario)

        assert sleep.await_count == len(scenario.conversation)
        first_delay = sleep.await_args_list[0].args[0]
        assert first_delay == pytest.approx(scenario.conversation[0].delay_ms / 1000 * 0.5)

    @pytest.mark.asyncio
    async def test_zero_speed_never_sleeps(self):
        sleep = AsyncMock()
        player = ScenarioPlayer(speed=0, sleep=sleep)
        await player.play(get_scenario_by_id("hr-recruitment"))
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_async_callback_awaited(self):
        callback = AsyncMock()
        scenario = get_scenario_by_id("financial-advisor")
        await ScenarioPlayer(speed=0).play(scenario, on_message=callback)
        assert callback.await_count == len(scenario.conversation)

    @pytest.mark.asyncio
    async def test_sync_callback_called(self):
        callback = MagicMock(return_value=None)
        scenario = get_scenario_by_id("legal-contract")
        await ScenarioPlayer(speed=0).play(scenario, on_message=callback)
        assert callback.call_count == len(scenario.conversation)

    @pytest.mark.asyncio
    async def test_transcript_roles(self):
        scenario = get_scenario_by_id("healthcare-triage")
        transcript = await ScenarioPlayer(speed=0).transcript(scenario)
        assert transcript[0] == {"role": "assistant", "content": OPENING_PROMPT}
        assert transcript[1]["role"] == "user"
        assert len(transcript) == len(scenario.conversation)
