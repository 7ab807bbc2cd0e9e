"""
Human-readable labels for task sequence action types.
"""

import re

ACTION_PREFIX = "SMS_TaskSequence_"
ACTION_SUFFIX = "Action"

# Labels that word splitting gets wrong
FRIENDLY_OVERRIDES = {
    "RunPowerShellScript": "Run PowerShell Script",
    "EnableBitLocker": "Enable BitLocker",
    "DisableBitLocker": "Disable BitLocker",
    "OfflineEnableBitLocker": "Pre-provision BitLocker",
    "AutoApply": "Auto Apply Drivers",
}

_WORD_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def strip_action_type(raw_type: str) -> str:
    """Remove the ``SMS_TaskSequence_`` prefix and ``Action`` suffix."""
    stripped = raw_type
    if stripped.startswith(ACTION_PREFIX):
        stripped = stripped[len(ACTION_PREFIX) :]
    if stripped.endswith(ACTION_SUFFIX) and stripped != ACTION_SUFFIX:
        stripped = stripped[: -len(ACTION_SUFFIX)]
    return stripped


def split_words(identifier: str) -> str:
    """
    Insert spaces at camel/Pascal-case word boundaries.

    Example:
        >>> split_words("ApplyOSImage")
        'Apply OS Image'
    """
    return _WORD_BOUNDARY.sub(" ", identifier)


def friendly_name(raw_type: str) -> str:
    """
    Convert a raw action type into a display label.

    Example:
        >>> friendly_name("SMS_TaskSequence_RunCommandLineAction")
        'Run Command Line'
    """
    stripped = strip_action_type(raw_type or "")
    if stripped in FRIENDLY_OVERRIDES:
        return FRIENDLY_OVERRIDES[stripped]
    return split_words(stripped)
