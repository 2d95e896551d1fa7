import re
from typing import Any

PERSONAS: dict[str, dict[str, Any]] = {
    "kai": {
        "id": "kai",
        "name": "카이",
        "prefix": "'카이':",
        "tone": "bright, quick and playful",
    },
    "ross": {
        "id": "ross",
        "name": "로스",
        "prefix": "'로스':",
        "tone": "cheerful, curious and a little teasing",
    },
}

_NAME_TO_ID = {str(value["name"]): key for key, value in PERSONAS.items()}

PERSONA_PREFIX_PATTERN = re.compile(
    r"^\s*[\"'‘’“”]?(" + "|".join(re.escape(name) for name in _NAME_TO_ID) + r")[\"'‘’“”]?\s*[:：]\s*",
)


def list_personas() -> list[dict[str, Any]]:
    return [
        {
            "id": str(value.get("id") or ""),
            "name": str(value.get("name") or ""),
            "prefix": str(value.get("prefix") or ""),
            "tone": str(value.get("tone") or ""),
        }
        for value in PERSONAS.values()
    ]


def split_persona_turns(text: str) -> list[tuple[str, str]]:
    """Split a two-persona answer into ``(persona_id, utterance)`` turns.

    A turn starts at a line prefixed with a persona name (``'카이':``,
    ``카이:``). Lines without a prefix continue the previous turn; anything
    before the first prefixed line is dropped.
    """
    turns: list[tuple[str, list[str]]] = []
    for line in str(text or "").splitlines():
        match = PERSONA_PREFIX_PATTERN.match(line)
        if match:
            turns.append((_NAME_TO_ID[match.group(1)], [line[match.end():].strip()]))
        elif turns:
            turns[-1][1].append(line.strip())
    return [(persona_id, "\n".join(part for part in parts if part).strip()) for persona_id, parts in turns]


def missing_personas(text: str) -> list[str]:
    spoken = {persona_id for persona_id, utterance in split_persona_turns(text) if utterance}
    return [persona_id for persona_id in PERSONAS if persona_id not in spoken]
