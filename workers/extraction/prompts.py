"""
Prompts for structured lab value extraction.

The field list is always rendered from the FieldCatalog so the model's
target order is the same order the deviation analyzer indexes by.
"""

from typing import Any, Dict, Sequence

# Schema handed to the model alongside the prompt
FEATURE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "features": {
            "type": "ARRAY",
            "items": {"type": "NUMBER"},
        }
    },
    "required": ["features"],
}


def format_field_list(field_names: Sequence[str]) -> str:
    return "\n".join(f"{i + 1}. {name}" for i, name in enumerate(field_names))


def get_feature_extraction_prompt(raw_text: str, field_names: Sequence[str]) -> str:
    """
    Build the instruction for turning OCR text into the feature vector.

    Args:
        raw_text: Combined OCR text of the batch
        field_names: Catalog names in vector order

    Returns:
        Prompt string
    """
    count = len(field_names)
    return f"""You are a medical lab report data extractor.
The text below was produced by OCR from scanned lab reports and may contain noise.

Extract the values of EXACTLY these {count} lab fields, in EXACTLY this order:
{format_field_list(field_names)}

RULES:
1. Return ONLY a JSON object of the form {{"features": [v1, v2, ..., v{count}]}}.
2. The "features" array MUST contain exactly {count} numbers, one per field above, in the order listed.
3. Each value must be a plain number in the unit shown in the field name (no units, no text, no ranges).
4. If a field cannot be found in the text, use 0 for that position. Never use null or a string.
5. Do not guess or calculate values that are not written in the text.

OCR TEXT:
{raw_text}
"""
