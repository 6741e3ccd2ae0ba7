import json
import re

from .schemas import ExtractedJson

_FENCED_JSON = re.compile(r"```json\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)


def extract_json_text(raw_text: str) -> str:
    """Pull the JSON payload out of model text that may carry prose or fences.

    A ```json fenced block wins. Otherwise the outer container is whichever of
    ``{`` or ``[`` appears first, sliced to the last matching closer. Text with
    no bracket at all comes back unchanged so that parsing fails loudly on it.
    An unrelated bracket pair before the real payload will be mis-sliced.
    """
    if not raw_text:
        return ""
    text = raw_text.strip()
    fenced = _FENCED_JSON.search(text)
    if fenced:
        return fenced.group(1).strip()

    starts = [(text.find(opener), opener, closer) for opener, closer in (("{", "}"), ("[", "]"))]
    starts = [entry for entry in starts if entry[0] != -1]
    if not starts:
        return text
    start, _opener, closer = min(starts)
    end = text.rfind(closer)
    if end <= start:
        return text
    return text[start : end + 1]


def parse_model_json(raw_text: str) -> ExtractedJson:
    return ExtractedJson(json.loads(extract_json_text(raw_text)))
