"""Unit tests for slash commands and follow-up suggestions."""
from eduassist.domain.chat import MAX_SUGGESTIONS, ModeFlags
from eduassist.services.commands import (
    CREATE_PLAN,
    MIND_MAP,
    apply_command,
    parse_command,
    suggest_followups,
)


class TestParseCommand:
    """Recognizing commands at the start of a message."""

    def test_command_with_argument(self):
        parsed = parse_command("/simular   queda livre ")

        assert parsed.name == "/simular"
        assert parsed.argument == "queda livre"

    def test_command_is_case_insensitive(self):
        assert parse_command("/MAPA").name == "/mapa"

    def test_plain_message_is_not_a_command(self):
        assert parse_command("O que é /mapa?") is None

    def test_unknown_command(self):
        assert parse_command("/dançar agora") is None


class TestApplyCommand:
    """Mode flags implied by commands."""

    def test_simulate_sets_command_and_simulation(self):
        modes = apply_command("/simular fotossíntese", ModeFlags())

        assert modes.command is True
        assert modes.simulation is True
        assert modes.life_connection is False

    def test_connect_sets_life_connection(self):
        assert apply_command("/conectar frações", ModeFlags()).life_connection is True

    def test_create_plan_sets_study_planning(self):
        assert apply_command("/criar_plano", ModeFlags()).study_planning is True

    def test_request_flags_are_kept(self):
        modes = apply_command("/mapa", ModeFlags(practice=True))

        assert modes.enabled() == ["practice", "command"]

    def test_non_command_returns_flags_unchanged(self):
        flags = ModeFlags(practice=True)

        assert apply_command("Explique a mitose", flags) is flags


class TestSuggestions:
    """Follow-ups shown under a reply."""

    def test_topic_suggestions_mention_topic(self):
        suggestions = suggest_followups("Mitose", ModeFlags())

        assert suggestions[0] == "/simular Mitose"
        assert suggestions[1] == "/conectar Mitose"
        assert len(suggestions) == MAX_SUGGESTIONS

    def test_fallback_without_topic(self):
        suggestions = suggest_followups("", ModeFlags())

        assert suggestions[0] == MIND_MAP
        assert len(suggestions) <= MAX_SUGGESTIONS

    def test_plan_not_suggested_while_planning(self):
        suggestions = suggest_followups("Mitose", ModeFlags(study_planning=True))

        assert CREATE_PLAN not in suggestions
