"""Keyword fingerprints for common design patterns.

These are substring checks, not static analysis. False positives and
negatives are expected.
"""

import re

SINGLETON = "singleton"
FACTORY = "factory"
OBSERVER = "observer"
STRATEGY = "strategy"
DECORATOR = "decorator"

STATIC_INSTANCE_PATTERN = re.compile(r"static\s+(?:\w+\s+)*_?instance\b")

OBSERVER_SUBSCRIBE_WORDS = ("subscribe", "addListener", "addEventListener", "addObserver")
OBSERVER_NOTIFY_WORDS = ("notify", "emit", "dispatch")


def detect_patterns(text: str) -> list[str]:
    """Return the design patterns whose keywords occur in the text."""
    patterns: list[str] = []

    if "getInstance" in text or STATIC_INSTANCE_PATTERN.search(text):
        patterns.append(SINGLETON)

    if "create" in text and "Factory" in text:
        patterns.append(FACTORY)

    if any(word in text for word in OBSERVER_SUBSCRIBE_WORDS) and any(
        word in text for word in OBSERVER_NOTIFY_WORDS
    ):
        patterns.append(OBSERVER)

    if "Strategy" in text:
        patterns.append(STRATEGY)

    if "Decorator" in text or "decorate" in text:
        patterns.append(DECORATOR)

    return patterns
