"""
Command Interpreter - Free Text to Actions

Turns one line typed into the manual-note box into actions. The grammar
is an ordered list of declarative rules; the first rule that matches
produces exactly one action. The last rule always matches and files the
text as a General note, so interpretation is total.

Examples:
    "Sarah is the champion"          -> update_stakeholder_role(Sarah, Champion)
    "Budget is $250,000 for 2025"    -> add_note(Budget)
    "They pay 3% CM fees"            -> add_note(Fees)
    "Go live is planned for March"   -> add_note(Timeline)
    "Met the team at the site walk"  -> add_note(General)
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.vocabulary import StakeholderRole
from .actions import ActionBase, AddNote, UpdateStakeholderRole


@dataclass
class CommandRule:
    """A pattern and the action it builds from a match."""
    name: str
    pattern: re.Pattern
    build: Callable[[re.Match, str], ActionBase]

    def apply(self, text: str) -> Optional[ActionBase]:
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.build(match, text)


def _role_rule(phrase: str, role: StakeholderRole) -> CommandRule:
    pattern = re.compile(
        rf"^(?P<name>.+?)\s+is\s+(?:the\s+|an?\s+)?{phrase}\b",
        re.IGNORECASE
    )

    def build(match: re.Match, text: str) -> ActionBase:
        name = match.group("name").strip()
        return UpdateStakeholderRole(
            name=name,
            new_role=role.value,
            message=f"Updated {name} to {role.value}"
        )

    return CommandRule(f"role:{role.value}", pattern, build)


def _note_rule(name: str, pattern: str, category: str, message: Callable[[re.Match], str]) -> CommandRule:
    def build(match: re.Match, text: str) -> ActionBase:
        return AddNote(category=category, content=text, message=message(match))

    return CommandRule(name, re.compile(pattern, re.IGNORECASE), build)


DEFAULT_RULES = [
    _role_rule("champion", StakeholderRole.CHAMPION),
    _role_rule(r"executive\s+sponsor", StakeholderRole.EXECUTIVE_SPONSOR),
    _role_rule("blocker", StakeholderRole.BLOCKER),
    _role_rule("influencer", StakeholderRole.INFLUENCER),
    _note_rule(
        "budget",
        r"budget\s+(?:is\s+)?(\$[\d,]+(?:\.\d{2})?|\d+k?)",
        "Budget",
        lambda m: f"Added budget note: {m.group(1)}"
    ),
    _note_rule(
        "fees",
        r"\bcm\s+fees?\b|construction\s+management",
        "Fees",
        lambda m: "Added note about fees"
    ),
    _note_rule(
        "timeline",
        r"timeline|go[\s-]live|launch\s+date",
        "Timeline",
        lambda m: "Added timeline note"
    ),
]

FALLBACK_RULE = _note_rule("general", r"", "General", lambda m: "Added general note")


class CommandInterpreter:
    """
    Ordered rule engine for manual notes.

    Rules are tried in order; the fallback rule always fires last.
    """

    def __init__(self, rules: Optional[list] = None):
        self._rules: list[CommandRule] = list(rules if rules is not None else DEFAULT_RULES)

    @property
    def rules(self) -> list:
        return [*self._rules, FALLBACK_RULE]

    def add_rule(self, rule: CommandRule, index: Optional[int] = None) -> None:
        """Register a rule (appended before the fallback unless an index is given)."""
        if index is None:
            self._rules.append(rule)
        else:
            self._rules.insert(index, rule)

    def parse(self, text: Optional[str]) -> list:
        """Interpret one line of text; always returns at least one action."""
        cleaned = (text or "").strip()

        for rule in self.rules:
            action = rule.apply(cleaned)
            if action is not None:
                return [action]

        # unreachable: the fallback pattern matches any string
        return [FALLBACK_RULE.build(None, cleaned)]


_default_interpreter = CommandInterpreter()


def interpret_command(text: Optional[str]) -> list:
    """Interpret free text with the default grammar."""
    return _default_interpreter.parse(text)
