from wallbounce.orchestration.insights import (
    extract_key_insights,
    extract_keywords,
    extract_related_topics,
    is_topic_relevant,
    suggest_followups,
)
from wallbounce.orchestration.session import SessionEntry, SessionStore


def test_keywords_drop_short_and_stop_words():
    assert extract_keywords("Why is the Oracle query slow? The query!") == ["oracle", "query", "slow"]


def test_topic_relevance_needs_two_shared_keywords():
    assert is_topic_relevant("Oracle query tuning", "slow Oracle query")
    assert not is_topic_relevant("Oracle backup", "Oracle licensing")


def test_related_topics_are_unique_and_ordered():
    topics = extract_related_topics("Azure Oracle query speed analysis on AWS")
    assert topics == ["Cloud Platform", "Database", "SQL Optimization", "Performance Tuning"]


def test_followups_are_capped():
    suggestions = suggest_followups("slow query fails with error", successful_count=3)
    assert len(suggestions) == 3
    assert suggestions[0] == "Ask for detailed implementation steps"


def test_no_followups_for_plain_query_with_few_successes():
    assert suggest_followups("explain closures", successful_count=2) == []


def test_key_insights_pick_headings_and_signal_words():
    text = "intro\n## Findings\nplain line\nWe recommend an index.\nWarning: locks\n"
    assert extract_key_insights(text) == ["## Findings", "We recommend an index.", "Warning: locks"]
    assert extract_key_insights("") == []


def entry(query, task_type="general", final="answer"):
    return SessionEntry(
        timestamp="2026-01-01T00:00:00+00:00",
        query=query,
        task_type=task_type,
        final_response=final,
        wall_bounce_count=3,
        successful_models=("gpt-5",),
    )


def test_store_bounds_entries_per_session():
    store = SessionStore(max_entries=2)
    for q in ("a", "b", "c"):
        store.record("s", entry(q))
    assert [e.query for e in store.history("s")] == ["c", "b"]


def test_store_evicts_least_recently_used_session():
    store = SessionStore(max_sessions=2)
    store.record("one", entry("q"))
    store.record("two", entry("q"))
    store.record("one", entry("q2"))
    store.record("three", entry("q"))

    assert len(store) == 2
    assert store.history("two") == []
    assert len(store.history("one")) == 2


def test_preamble_includes_only_relevant_recent_entries():
    store = SessionStore()
    store.record("s", entry("Oracle query tuning", task_type="analysis", final="Add an index."))
    store.record("s", entry("Write a haiku", task_type="coding"))

    preamble = store.build_preamble("s", "slow Oracle query", "architecture")
    assert preamble.startswith("## Earlier in this session")
    assert "Oracle query tuning" in preamble
    assert "Add an index." in preamble
    assert "haiku" not in preamble


def test_preamble_prefers_key_insights_of_earlier_answers():
    store = SessionStore()
    final = "Long discussion of plans.\n## Root cause\nStale statistics.\nWe recommend a nightly stats job."
    store.record("s", entry("Oracle query tuning", final=final))

    preamble = store.build_preamble("s", "Oracle query again", "general")
    assert "**Conclusion**: ## Root cause; We recommend a nightly stats job." in preamble
    assert "Long discussion" not in preamble


def test_preamble_is_empty_for_unknown_session():
    assert SessionStore().build_preamble("nope", "q", "general") == ""
