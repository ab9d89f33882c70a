"""
Removes Mermaid directives that can run script or load external content.

Runs before syntax repair. Ordinary ``%%`` comments are preserved and every
other byte of the diagram is left as it was.
"""

import logging
import re
from typing import List, Pattern

logger = logging.getLogger(__name__)

DANGEROUS_PATTERNS: List[Pattern] = [
    # Click handlers with href or call (can execute JavaScript), whole line
    re.compile(r'^[ \t]*click\s+\S+\s+(?:href|call)\b[^\r\n]*(?:\r\n|\r|\n)?', re.IGNORECASE | re.MULTILINE),
    # Config blocks such as %%{init: {"securityLevel": "loose"}}%%
    re.compile(r'[ \t]*%%\{[^\r\n]*\}%%[ \t]*(?:\r\n|\r|\n)?'),
]


def strip_dangerous_directives(source: str) -> str:
    """
    Strip click href/call directives and %%{...}%% config blocks.

    Example:
        >>> strip_dangerous_directives('flowchart TD\\nA-->B\\nclick A href "https://x"')
        'flowchart TD\\nA-->B\\n'
    """
    if not source:
        return source

    stripped = source
    for pattern in DANGEROUS_PATTERNS:
        stripped, count = pattern.subn('', stripped)
        if count:
            logger.info(f"Removed {count} dangerous Mermaid directive(s) matching {pattern.pattern[:40]!r}")
    return stripped
