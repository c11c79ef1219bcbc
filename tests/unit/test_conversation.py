"""Tests for the discovery conversation engine."""

import pytest

from workflow_pricing.core.conversation import (
    QUESTION_FLOW,
    QuestionKind,
    generate_workflow_summary,
    get_next_question,
    initialize_conversation,
    is_complete,
    process_response,
    split_monthly_volume,
    to_workload,
)
from workflow_pricing.core.models import ConversationState, ExtractedWorkflowData


def _answer_all(answers):
    state = initialize_conversation()
    for answer in answers:
        state = process_response(answer, state)
    return state


SUPPORT_DESK_ANSWERS = [
    "Customer support for our online store",
    ["Email", "Chat/Messaging"],
    "10,000",
    "4-6 steps (Moderate complexity with some logic)",
    "Yes - It needs to look up information occasionally (1-2 lookups per request)",
    "Yes - 1-2 simple integrations (like checking a database)",
    "A small team (2-3 specialized agents working together)",
    "0",
    "Moderate - Some quality checks are good",
    "Medium length (a paragraph, like email responses or summaries)",
]


class TestConversationFlow:
    """Tests for flow progression."""

    def test_initial_state(self):
        state = initialize_conversation()
        assert state.current_step == 0
        assert dict(state.responses) == {}
        assert state.extracted_data == ExtractedWorkflowData()
        assert get_next_question(state).id == "business_problem"

    def test_question_order(self):
        assert [q.id for q in QUESTION_FLOW] == [
            "business_problem",
            "channels",
            "monthly_volume",
            "workflow_steps",
            "knowledge_base",
            "integrations",
            "agent_needs",
            "document_processing",
            "safety_requirements",
            "response_length",
        ]

    def test_choice_questions_have_options(self):
        for question in QUESTION_FLOW:
            if question.kind in (QuestionKind.CHOICE, QuestionKind.MULTI_CHOICE):
                assert question.options

    @pytest.mark.parametrize(
        "answers",
        [
            [""] * len(QUESTION_FLOW),
            [None] * len(QUESTION_FLOW),
            ["nonsense"] * len(QUESTION_FLOW),
            [[]] * len(QUESTION_FLOW),
            SUPPORT_DESK_ANSWERS,
        ],
    )
    def test_flow_always_terminates(self, answers):
        state = _answer_all(answers)
        assert get_next_question(state) is None
        assert is_complete(state)
        assert state.current_step == len(QUESTION_FLOW)

    def test_each_answer_advances_one_step(self):
        state = initialize_conversation()
        for expected_step in range(1, len(QUESTION_FLOW) + 1):
            state = process_response("anything", state)
            assert state.current_step == expected_step

    def test_terminal_state_is_returned_unchanged(self):
        state = _answer_all(SUPPORT_DESK_ANSWERS)
        assert process_response("extra", state) is state

    def test_process_response_does_not_mutate_input(self):
        state = initialize_conversation()
        new_state = process_response("Invoice processing", state)
        assert state.current_step == 0
        assert dict(state.responses) == {}
        assert state.extracted_data.workflow_description == ""
        assert new_state.responses["business_problem"] == "Invoice processing"
        assert new_state.extracted_data.workflow_description == "Invoice processing"

    def test_state_round_trips_through_snapshot(self):
        state = _answer_all(SUPPORT_DESK_ANSWERS[:4])
        snapshot = state.to_dict()
        assert snapshot["step"] == 4
        assert snapshot["extractedData"]["channels"] == ["email", "chat"]
        assert ConversationState.from_dict(snapshot) == state


class TestExtraction:
    """Tests for answer extraction."""

    def test_support_desk_answers(self):
        data = _answer_all(SUPPORT_DESK_ANSWERS).extracted_data
        assert data.workflow_description == "Customer support for our online store"
        assert data.channels == ("email", "chat")
        assert data.emails_per_month == 6000
        assert data.chats_per_month == 4000
        assert data.workflow_triggers_per_day == 0
        assert data.complexity_tier == "Medium"
        assert data.requires_knowledge_base is True
        assert data.rag_queries == 2
        assert data.tool_calls == 1
        assert data.db_queries == 3
        assert data.num_agents == 3
        assert data.needs_orchestration is True
        assert data.inter_agent_tokens == 500
        assert data.docs_per_month == 0
        assert data.reflection_runs == 1
        assert data.estimated_input_tokens == 2000
        assert data.estimated_output_tokens == 800

    def test_unrecognized_channel_labels_ignored(self):
        state = _answer_all(["x", ["API/Integration", "Fax"]])
        assert state.extracted_data.channels == ()

    def test_single_channel_string_accepted(self):
        state = _answer_all(["x", "Email"])
        assert state.extracted_data.channels == ("email",)

    def test_unparseable_volume_uses_default(self):
        state = _answer_all(["x", ["Chat/Messaging"], "lots"])
        assert state.extracted_data.chats_per_month == 5000
        assert state.extracted_data.emails_per_month == 0

    def test_negative_volume_clamped(self):
        state = _answer_all(["x", ["Email"], "-40"])
        assert state.extracted_data.emails_per_month == 0

    def test_numeric_volume_answer(self):
        state = _answer_all(["x", ["Email"], 1200])
        assert state.extracted_data.emails_per_month == 1200

    def test_document_count(self):
        answers = SUPPORT_DESK_ANSWERS[:7] + ["About 300 documents"]
        data = _answer_all(answers).extracted_data
        assert data.docs_per_month == 300
        assert data.pages_per_doc == 5

    def test_fallback_option_is_most_demanding(self):
        answers = ["x", [], "10", "?", "?", "?", "?", "?", "?", "?"]
        data = _answer_all(answers).extracted_data
        assert data.complexity_tier == "High"
        assert data.rag_queries == 5
        assert data.tool_calls == 3
        assert data.num_agents == 6
        assert data.reflection_runs == 2
        assert data.estimated_output_tokens == 1500


class TestVolumeSplit:
    """Tests for splitting monthly volume across channels."""

    @pytest.mark.parametrize("total", [0, 1, 2, 3, 7, 999, 5000, 10001])
    def test_email_and_chat_split_is_exact(self, total):
        split = split_monthly_volume(total, ("email", "chat"))
        assert split["emails_per_month"] + split["chats_per_month"] == total
        assert split["workflow_triggers_per_day"] == 0

    def test_split_ratio(self):
        split = split_monthly_volume(10000, ("email", "chat"))
        assert split["emails_per_month"] == 6000
        assert split["chats_per_month"] == 4000

    def test_single_channel_takes_all(self):
        assert split_monthly_volume(800, ("chat", "voice"))["chats_per_month"] == 800
        assert split_monthly_volume(800, ("email",))["emails_per_month"] == 800

    def test_no_text_channel_becomes_triggers(self):
        split = split_monthly_volume(2200, ("documents",))
        assert split == {
            "emails_per_month": 0,
            "chats_per_month": 0,
            "workflow_triggers_per_day": 100,
        }


class TestSummaryAndWorkload:
    """Tests for summary text and workload conversion."""

    def test_summary(self):
        data = _answer_all(SUPPORT_DESK_ANSWERS).extracted_data
        summary = generate_workflow_summary(data)
        assert summary.startswith("Customer support for our online store. ")
        assert "10,000 interactions per month via email, chat" in summary
        assert "3 AI agents with medium complexity" in summary

    def test_summary_without_channels(self):
        data = ExtractedWorkflowData(
            emails_per_month=0, chats_per_month=0, workflow_triggers_per_day=10
        )
        summary = generate_workflow_summary(data)
        assert summary.startswith("This system handles approximately 220 interactions")
        assert "via automated workflow triggers" in summary
        assert "1 AI agent with" in summary

    def test_to_workload(self):
        data = _answer_all(SUPPORT_DESK_ANSWERS).extracted_data
        workload = to_workload(data, "GPT-4o")

        assert workload.model == "GPT-4o"
        assert workload.transactions_per_month == 10000
        assert workload.tokens.inter_agent_tokens == 500
        assert workload.features.rag_queries == 2
        assert workload.features.memory_ops == 3
        assert workload.setup.agents == 3
        assert workload.setup.knowledge_bases == 1
        assert workload.setup.tools == 1
        assert workload.setup.eval_suites == 1

    def test_to_workload_without_knowledge_base_or_reflection(self):
        data = ExtractedWorkflowData(requires_knowledge_base=False, reflection_runs=0)
        workload = to_workload(data, "GPT-4o")
        assert workload.setup.knowledge_bases == 0
        assert workload.setup.eval_suites == 0
