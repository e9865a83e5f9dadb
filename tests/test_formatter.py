"""Tests for memory rendering and formatting helpers."""

from datetime import datetime, timedelta, timezone

from threadline.formatting import display_sender, format_timestamp, is_self
from threadline.memory.formatter import (
    FOCUS_HEADER,
    NO_HISTORY,
    PARENT_HEADER,
    REPLIES_HEADER,
    render_history,
    render_memory,
    render_thread,
)
from threadline.thread.models import HistoryEntry, QuoteContext, ThreadNode

BOT = "threadbot"


def nodes_from(*messages, quotes=None) -> list[ThreadNode]:
    quotes = quotes or {}
    nodes = [ThreadNode(message=m, quote=quotes.get(m.id)) for m in messages]
    last = nodes[-1]
    nodes[-1] = ThreadNode(message=last.message, quote=last.quote, is_focus=True)
    return nodes


class TestFormattingHelpers:

    def test_format_timestamp_aware(self):
        dt = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        assert format_timestamp(dt) == "2024-05-01 12:30 UTC"

    def test_format_timestamp_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 5, 1, 8, 5)) == "2024-05-01 08:05 UTC"

    def test_is_self_matches_handle_case_insensitive(self):
        assert is_self("ThreadBot", BOT)
        assert is_self("@threadbot", BOT)
        assert not is_self("alice", BOT)

    def test_agent_sender_always_self(self):
        assert is_self("agent", "")
        assert is_self("Agent", BOT)

    def test_empty_bot_handle_matches_nothing_else(self):
        assert not is_self("", "")
        assert display_sender("alice", "") == "alice"


class TestRenderThread:

    def test_single_message_is_focus_only(self, make_msg):
        text = render_thread(nodes_from(make_msg("1", "alice", "Hello there")), BOT)
        assert PARENT_HEADER not in text
        assert REPLIES_HEADER not in text
        assert f"{FOCUS_HEADER}\n[2024-05-01 10:00 UTC] alice: Hello there" in text

    def test_parent_and_focus(self, make_msg):
        nodes = nodes_from(
            make_msg("1", "alice", "Hello", minute=0),
            make_msg("2", "bob", "Hi", minute=1, parent_id="1"),
        )
        text = render_thread(nodes, BOT)
        assert f"{PARENT_HEADER}\n[2024-05-01 10:00 UTC] alice: Hello\n" in text
        assert REPLIES_HEADER not in text
        assert f"{FOCUS_HEADER}\n[2024-05-01 10:01 UTC] bob: Hi\n" in text

    def test_section_order(self, make_msg):
        nodes = nodes_from(
            make_msg("1", "alice", "root", minute=0),
            make_msg("2", "bob", "middle one", minute=1),
            make_msg("3", "threadbot", "middle two", minute=2),
            make_msg("4", "bob", "focus", minute=3),
        )
        text = render_thread(nodes, BOT)
        assert text.index(PARENT_HEADER) < text.index(REPLIES_HEADER) < text.index(FOCUS_HEADER)
        replies = text.split(REPLIES_HEADER)[1].split(FOCUS_HEADER)[0]
        assert "bob: middle one" in replies
        assert "(YOU): middle two" in replies
        assert "threadbot" not in text

    def test_quote_lines(self, make_msg):
        quote = QuoteContext(
            sender="dora",
            text="quoted words",
            timestamp=datetime(2024, 4, 1, tzinfo=timezone.utc),
            photos=("https://img/a.jpg", "https://img/b.jpg"),
        )
        nodes = nodes_from(make_msg("1", "alice", "look at this", quoted_id="q"), quotes={"1": quote})
        text = render_thread(nodes, BOT)
        assert "alice: look at this\n    📝 Quoting dora: quoted words\n    🖼️ Quote tweet contains 2 image(s)" in text
        assert "https://img/a.jpg" not in text

    def test_quote_of_bot_uses_self_label(self, make_msg):
        quote = QuoteContext(sender="threadbot", text="my old post", timestamp=datetime(2024, 4, 1))
        nodes = nodes_from(make_msg("1", "alice", "remember?"), quotes={"1": quote})
        text = render_thread(nodes, BOT)
        assert "📝 Quoting (YOU): my old post" in text
        assert "🖼️" not in text

    def test_empty_sequence(self):
        assert render_thread([], BOT) == "Current Tweet Thread:\n\n"


class TestRenderHistory:

    def test_placeholder_when_empty(self):
        assert render_history([], BOT) == NO_HISTORY

    def test_history_chronological(self, make_entry):
        entries = [
            make_entry("agent", "later reply", minute=5),
            make_entry("alice", "earlier question", minute=1),
        ]
        text = render_history(entries, BOT)
        assert text.startswith("Past Conversation History:\n\n")
        assert text.index("earlier question") < text.index("later reply")
        assert "(YOU): later reply" in text

    def test_mixed_naive_and_aware_sorted_as_utc(self):
        entries = [
            HistoryEntry("alice", "aware later", datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)),
            HistoryEntry("agent", "naive earlier", datetime(2024, 5, 1, 9, 0)),
            HistoryEntry("alice", "offset earliest", datetime(2024, 5, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))),
        ]
        text = render_history(entries, BOT)
        assert text.index("offset earliest") < text.index("naive earlier") < text.index("aware later")
        assert "[2024-05-01 08:00 UTC] alice: offset earliest" in text

    def test_entry_without_timestamp_skipped(self, make_entry):
        entries = [make_entry("bob", "kept"), HistoryEntry("agent", "no time", None)]
        text = render_history(entries, BOT)
        assert "bob: kept" in text
        assert "no time" not in text

    def test_only_undated_entries_is_placeholder(self):
        assert render_history([HistoryEntry("bob", "no time", None)], BOT) == NO_HISTORY


class TestRenderMemory:

    def test_four_part_layout(self, make_msg, make_entry):
        nodes = nodes_from(
            make_msg("1", "alice", "Hello", minute=0),
            make_msg("2", "bob", "Hi", minute=1),
        )
        text = render_memory(nodes, [make_entry("bob", "old chat")], BOT)
        thread, history = text.split("\n\n\nPast Conversation History:")
        assert thread.startswith("Current Tweet Thread:\n\nParent Tweet:")
        assert "old chat" in history

    def test_no_history_placeholder(self, make_msg):
        text = render_memory(nodes_from(make_msg("1", "bob", "Hi")), [], BOT)
        assert text.endswith("\n\n" + NO_HISTORY)
