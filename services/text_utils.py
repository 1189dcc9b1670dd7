from typing import Optional

# Applied in order, starting with "&amp;"
_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&nbsp;", " "),
)


def decode_html_entities(text: Optional[str]) -> str:
    """
    Decode the small fixed set of HTML entities YouTube leaves in titles and captions.
    Not a general decoder: anything outside the table is left untouched.
    """
    if not text:
        return ""
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text
