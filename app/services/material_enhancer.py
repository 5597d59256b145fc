import os
import json
from typing import Any, Dict, Optional

from openai import OpenAI

from app.config import OPENAI_MODEL

_client: Optional[OpenAI] = None


def get_client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
    return _client


INSTRUCTIONS = """
You are a research assistant for a novelist.
You enrich a single story material (a character, place, item, faction or setting)
with concrete, usable detail that stays consistent with what the author already wrote.
Never contradict the existing description. Prefer specifics over adjectives.
""".strip()


def _attributes_block(attributes: Optional[dict[str, Any]]) -> str:
    if not attributes:
        return "(none)"
    return json.dumps(attributes, ensure_ascii=False, indent=2)


def build_prompt(payload: Dict[str, Any]) -> str:
    return f"""
MATERIAL:
Name: {payload.get("materialName")}
Type: {payload.get("materialType") or "custom"}

CURRENT DESCRIPTION:
{payload.get("currentDescription") or "(none)"}

CURRENT ATTRIBUTES:
{_attributes_block(payload.get("currentAttributes"))}

OUTPUT FORMAT (MUST FOLLOW EXACTLY):
Return only a JSON object:
{{"description": "<enhanced description>", "attributes": {{"<key>": "<value>"}}}}
""".strip()


def parse_model_json(text: str) -> Optional[Dict[str, Any]]:
    text = (text or "").strip()
    # models like to wrap JSON in a code fence
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def enhance_material(payload: Dict[str, Any], user_id: str) -> Dict[str, Any]:
    """MATERIAL_ENHANCE handler.

    Returns:
      {"description": ..., "attributes": {...}, "enhanced": True}
    or, when the model output is not usable JSON, the current values plus
    "rawContent" and "error".
    """
    current_description = payload.get("currentDescription")
    current_attributes = payload.get("currentAttributes")

    resp = get_client().responses.create(
        model=OPENAI_MODEL,
        instructions=INSTRUCTIONS,
        input=build_prompt(payload),
        temperature=0.3,
    )
    raw = (resp.output_text or "").strip()

    parsed = parse_model_json(raw)
    if parsed is None:
        return {
            "description": current_description,
            "attributes": current_attributes,
            "rawContent": raw,
            "error": "Could not parse the enhanced material, see rawContent",
        }

    return {
        "description": parsed.get("description") or current_description,
        "attributes": parsed.get("attributes") or current_attributes,
        "enhanced": True,
    }
