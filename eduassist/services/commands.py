"""Slash commands typed in the chat box and follow-up suggestions."""
from typing import List, NamedTuple, Optional

from eduassist.domain.chat import MAX_SUGGESTIONS, ModeFlags

SIMULATE = "/simular"
CONNECT = "/conectar"
CREATE_PLAN = "/criar_plano"
SECOND_BRAIN = "/segunda_mente"
MIND_MAP = "/mapa"

# command -> extra mode flags it switches on (besides "command")
COMMAND_MODES = {
    SIMULATE: {"simulation": True},
    CONNECT: {"life_connection": True},
    CREATE_PLAN: {"study_planning": True},
    SECOND_BRAIN: {},
    MIND_MAP: {},
}


class ParsedCommand(NamedTuple):
    name: str
    argument: str


def parse_command(message: str) -> Optional[ParsedCommand]:
    """Return the command at the start of a message, if it is a known one."""
    stripped = message.strip()
    if not stripped.startswith("/"):
        return None
    name, _, argument = stripped.partition(" ")
    name = name.lower()
    if name not in COMMAND_MODES:
        return None
    return ParsedCommand(name=name, argument=argument.strip())


def apply_command(message: str, modes: ModeFlags) -> ModeFlags:
    """Merge the flags implied by a slash command into the request's flags."""
    command = parse_command(message)
    if command is None:
        return modes
    return modes.model_copy(update={"command": True, **COMMAND_MODES[command.name]})


def suggest_followups(topic: str, modes: ModeFlags) -> List[str]:
    """Up to four next steps offered under an assistant reply.

    With a review topic the suggestions point at that concept; without one
    they fall back to the general study tools.
    """
    if topic:
        suggestions = [
            f"{SIMULATE} {topic}",
            f"{CONNECT} {topic}",
            f"Crie exercícios sobre {topic}",
            CREATE_PLAN,
        ]
    else:
        suggestions = [MIND_MAP, CREATE_PLAN, "Me dê um exemplo prático", "Resuma em tópicos"]

    if modes.study_planning:
        suggestions = [s for s in suggestions if s != CREATE_PLAN]
    return suggestions[:MAX_SUGGESTIONS]
