"""Decode vCard media into ContactCard records.

vobject stops at the first malformed component when reading a stream, so the
payload is split into BEGIN:VCARD ... END:VCARD blocks and each block is
parsed on its own. A bad block becomes a DecodeError in the output instead of
hiding the cards after it.
"""

import logging
import re

import vobject

from smsbook.domain import CardProperty, ContactCard, DecodeError

logger = logging.getLogger(__name__)

_BLOCK_SPLIT = re.compile(r"(?=^BEGIN:VCARD)", re.IGNORECASE | re.MULTILINE)


def decode_vcards(text: str) -> list[ContactCard | DecodeError]:
    """Decode every vCard in text. Items are cards, or the error for a bad card."""
    out: list[ContactCard | DecodeError] = []
    for block in _BLOCK_SPLIT.split(text or ""):
        if not block.strip():
            continue
        if "END:VCARD" not in block.upper():
            out.append(DecodeError("Unterminated vCard"))
            continue
        try:
            component = vobject.readOne(block)
        except Exception as e:  # vobject raises ParseError and assorted ValueErrors
            logger.debug("vCard parse error: %s", e)
            out.append(DecodeError(f"Malformed vCard: {e}"))
            continue
        out.append(_component_to_card(component))
    return out


def _component_to_card(component) -> ContactCard:
    properties = []
    for line in component.getChildren():
        value = line.value
        if value is not None and not isinstance(value, str):
            value = str(value)
        params = {
            str(key).upper(): tuple(str(v) for v in values)
            for key, values in (line.params or {}).items()
        }
        # vCard 2.1 writes bare types, e.g. TEL;CELL:...
        singletons = getattr(line, "singletonparams", None)
        if singletons and "TYPE" not in params:
            params["TYPE"] = tuple(str(v) for v in singletons)
        properties.append(
            CardProperty(name=line.name.upper(), value=value, params=params)
        )
    return ContactCard(properties=tuple(properties))
