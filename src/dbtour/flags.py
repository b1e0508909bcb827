"""Feature switches for the ``DBTOUR_FEATURES`` environment variable.

Tokens are comma separated: ``name`` switches a feature on, ``!name`` or
``-name`` switches it off, and ``name=false`` sets an explicit value.
Names are case-insensitive and treat ``-`` and ``_`` alike.
"""

from __future__ import annotations

ENV_VAR = "DBTOUR_FEATURES"

_STATES = {
    **dict.fromkeys(("1", "true", "on", "yes", "enable", "enabled"), True),
    **dict.fromkeys(("0", "false", "off", "no", "disable", "disabled"), False),
}


def normalise(name: str) -> str:
    return name.strip().lower().replace("-", "_")


def parse_tokens(raw: str) -> dict[str, bool]:
    """Map each named feature to its state; tokens with unknown values are dropped."""

    features: dict[str, bool] = {}
    for token in filter(None, (part.strip() for part in raw.split(","))):
        name, sep, value = token.partition("=")
        if name.startswith(("!", "-")):
            features[normalise(name[1:])] = False
        elif not sep:
            features[normalise(name)] = True
        elif value.strip().lower() in _STATES:
            features[normalise(name)] = _STATES[value.strip().lower()]
    return features
