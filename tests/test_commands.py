"""
Tests for the rule-based command interpreter.
"""

import re

import pytest

from account_intel import interpret_command
from account_intel.layers.orchestration import (
    AddNote,
    CommandInterpreter,
    CommandRule,
    UpdateStakeholderRole,
)


class TestRoleRules:

    def test_champion(self):
        actions = interpret_command("Sarah is the champion")
        assert len(actions) == 1
        action = actions[0]
        assert isinstance(action, UpdateStakeholderRole)
        assert action.name == "Sarah"
        assert action.new_role == "Champion"

    @pytest.mark.parametrize("text,name,role", [
        ("Mike Chen is an executive sponsor", "Mike Chen", "Executive Sponsor"),
        ("Tom is a blocker on this deal", "Tom", "Blocker"),
        ("JANE SMITH IS AN INFLUENCER", "JANE SMITH", "Influencer"),
        ("  Pat is champion  ", "Pat", "Champion"),
    ])
    def test_role_phrases(self, text, name, role):
        action = interpret_command(text)[0]
        assert isinstance(action, UpdateStakeholderRole)
        assert action.name == name
        assert action.new_role == role

    def test_name_stops_at_first_is(self):
        action = interpret_command("Ana is the champion and Bo is a blocker")[0]
        assert action.name == "Ana"
        assert action.new_role == "Champion"


class TestNoteRules:

    def test_budget(self):
        action = interpret_command("Budget is $250,000 for next year")[0]
        assert isinstance(action, AddNote)
        assert action.category == "Budget"
        assert action.content == "Budget is $250,000 for next year"
        assert "$250,000" in action.message

    def test_budget_without_amount_is_general(self):
        action = interpret_command("Budget discussions are ongoing")[0]
        assert action.category == "General"

    def test_fees(self):
        assert interpret_command("They charge 4% CM fees")[0].category == "Fees"
        assert interpret_command("Construction management handled in-house")[0].category == "Fees"

    @pytest.mark.parametrize("text", [
        "Timeline is tight",
        "Go-live planned for March",
        "go live in Q3",
        "Launch date moved",
    ])
    def test_timeline(self, text):
        assert interpret_command(text)[0].category == "Timeline"


class TestFallback:

    @pytest.mark.parametrize("text", ["Met the team at the site walk", "", None, "   "])
    def test_always_returns_one_action(self, text):
        actions = interpret_command(text)
        assert len(actions) == 1
        assert actions[0].category == "General"
        assert actions[0].message == "Added general note"

    def test_role_rule_wins_over_note_rule(self):
        action = interpret_command("Dana is the champion for the go-live")[0]
        assert isinstance(action, UpdateStakeholderRole)


class TestCommandInterpreter:

    def test_custom_rule_before_fallback(self):
        interpreter = CommandInterpreter()
        interpreter.add_rule(CommandRule(
            "competition",
            re.compile(r"competitor|procore", re.IGNORECASE),
            lambda m, text: AddNote(category="Competition", content=text),
        ))
        assert interpreter.parse("They also looked at Procore")[0].category == "Competition"
        assert interpreter.rules[-1].name == "general"

    def test_rule_inserted_first_takes_precedence(self):
        interpreter = CommandInterpreter()
        interpreter.add_rule(
            CommandRule("all", re.compile(r"."), lambda m, text: AddNote(category="Custom", content=text)),
            index=0,
        )
        assert interpreter.parse("Sarah is the champion")[0].category == "Custom"

    def test_empty_rule_set_still_total(self):
        interpreter = CommandInterpreter(rules=[])
        for text in ["x", "", "Sarah is the champion"]:
            actions = interpreter.parse(text)
            assert len(actions) == 1
            assert actions[0].category == "General"
