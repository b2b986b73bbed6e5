"""
Style aggregation across the pages of a filing.

Each page repeats (or varies) its header styles. The aggregator collects
them from every processed page and keeps one copy of each, in first-seen
order:
- <style> block bodies
- <link rel="stylesheet"> tags, serialized
- CSS rules sitting in the header outside any <style> element, found by
  pattern over the raw header markup
"""

import logging
import re
from typing import Optional

from .document import FilingDocument
from .models import StyleKind, StyleRule

logger = logging.getLogger(__name__)


# Fallback styling, emitted after the collected rules
BASELINE_CSS = """body { font-family: Arial, sans-serif; margin: 20px; }
table { border-collapse: collapse; }
table, th, td { border: 1px solid #ccc; }
th, td { padding: 5px 10px; }"""


class StyleAggregator:
    """Session-wide, deduplicated set of style rules."""

    HEAD_PATTERN = re.compile(
        r"<head\b[^>]*>(.*?)(?:</head\s*>|<body\b)",
        re.IGNORECASE | re.DOTALL,
    )
    BODY_OPEN_PATTERN = re.compile(r"<body\b", re.IGNORECASE)

    # Blocks removed from the raw header before looking for loose rules
    STRIP_PATTERNS = [
        re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL),
        re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL),
        re.compile(r"<title\b[^>]*>.*?</title\s*>", re.IGNORECASE | re.DOTALL),
        re.compile(r"<!--.*?-->", re.DOTALL),
        re.compile(r"<[^>]*>"),
    ]

    # "selector { prop: value; ... }" starting on its own line
    CSS_RULE_PATTERN = re.compile(r"^[ \t]*([^\s{}<>;][^{}<>;\n]*?)\s*\{([^{}]*)\}", re.MULTILINE)

    def __init__(self):
        self._rules: list[StyleRule] = []
        self._seen: set[str] = set()

    @property
    def rules(self) -> list[StyleRule]:
        return list(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def add(self, rule: StyleRule) -> bool:
        """Add a rule unless the same text was already collected."""
        if rule.text in self._seen:
            return False
        self._seen.add(rule.text)
        self._rules.append(rule)
        return True

    def collect(self, document: FilingDocument) -> int:
        """
        Collect the header styles of one document.

        Returns:
            Number of rules that were new to the session
        """
        added = 0
        for rule in self.scan(document):
            if self.add(rule):
                added += 1

        if added:
            logger.debug(f"Collected {added} new style rule(s) from {document.name}")
        return added

    def scan(self, document: FilingDocument) -> list[StyleRule]:
        """All style rules of a document header, in document order."""
        rules = []

        head = document.head
        if head is not None:
            for elem in head.find_all(["style", "link"]):
                if elem.name == "style":
                    text = "".join(str(child) for child in elem.contents).strip()
                    if text:
                        rules.append(StyleRule(StyleKind.STYLE_BLOCK, text))
                elif self._is_stylesheet_link(elem.get("rel")):
                    rules.append(StyleRule(StyleKind.STYLESHEET_LINK, str(elem)))

        for text in self.find_loose_rules(document.markup):
            rules.append(StyleRule(StyleKind.LOOSE_RULE, text))

        return rules

    def find_loose_rules(self, markup: str) -> list[str]:
        """CSS rules written into the header without a <style> element."""
        region = self._header_region(markup)
        if not region:
            return []

        for pattern in self.STRIP_PATTERNS:
            region = pattern.sub("\n", region)

        rules = []
        for match in self.CSS_RULE_PATTERN.finditer(region):
            selector = match.group(1).strip()
            declarations = " ".join(match.group(2).split())
            if selector and ":" in declarations:
                rules.append(f"{selector} {{ {declarations} }}")
        return rules

    def render(self, baseline_css: Optional[str] = BASELINE_CSS) -> str:
        """
        Header markup for the assembled document.

        Style blocks and links come first in first-seen order, then the
        loose rules in one <style> element, then the baseline stylesheet.
        """
        parts = []
        loose = []
        for rule in self._rules:
            if rule.kind == StyleKind.STYLE_BLOCK:
                parts.append(f"<style>\n{rule.text}\n</style>")
            elif rule.kind == StyleKind.STYLESHEET_LINK:
                parts.append(rule.text)
            else:
                loose.append(rule.text)

        if loose:
            parts.append("<style>\n" + "\n".join(loose) + "\n</style>")
        if baseline_css:
            parts.append(f"<style>\n{baseline_css}\n</style>")
        return "\n".join(parts)

    def _header_region(self, markup: str) -> str:
        match = self.HEAD_PATTERN.search(markup)
        if match:
            return match.group(1)
        # No <head>: whatever precedes <body>
        body = self.BODY_OPEN_PATTERN.search(markup)
        if body:
            return markup[:body.start()]
        return ""

    @staticmethod
    def _is_stylesheet_link(rel) -> bool:
        if not rel:
            return False
        if isinstance(rel, str):
            rel = rel.split()
        return any(value.lower() == "stylesheet" for value in rel)
