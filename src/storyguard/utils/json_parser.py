"""JSON cleanup for LLM output."""
import json
import logging

from json_repair import repair_json as lib_repair_json

logger = logging.getLogger("StoryGuard")


def _first_json_object_end(text: str) -> int:
    """Return the end offset of the first complete top-level JSON object, or 0."""
    depth = 0
    in_string = False
    escape_next = False

    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue
        if char == '\\':
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                try:
                    json.loads(text[:i + 1])
                    return i + 1
                except json.JSONDecodeError:
                    pass
    return 0


def repair_json(json_str: str) -> str:
    """
    Repair common LLM JSON mistakes before parsing.

    Strips anything trailing the first complete object (markdown fences,
    explanations) and lets json_repair fix missing quotes, trailing commas,
    single quotes and the like.

    Returns:
        Repaired JSON string
    """
    if not json_str:
        return json_str

    cleaned = json_str.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
    if cleaned.rstrip().endswith("```"):
        cleaned = cleaned.rstrip()[:-3]
    start = cleaned.find("{")
    if start > 0:
        cleaned = cleaned[start:]

    end = _first_json_object_end(cleaned)
    if 0 < end < len(cleaned):
        logger.info(f"[JSON REPAIR] Removed trailing content after JSON ({len(cleaned) - end} chars)")
        cleaned = cleaned[:end]

    repaired = lib_repair_json(cleaned, skip_json_loads=True)
    if repaired != json_str:
        logger.info("[JSON REPAIR] Applied repairs using json_repair library")
    return repaired
