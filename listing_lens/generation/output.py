"""Cleanup of raw model output into a standalone HTML document."""

import re

_FENCE = re.compile(r"```(?:html)?\n?", re.IGNORECASE)
_DOCUMENT_END = "</html>"


def extract_html_document(raw: str) -> str:
    """Strip code fences and any commentary around the HTML document.

    The document runs from the first ``<!DOCTYPE html>`` (or ``<html`` when
    there is no doctype) to the last ``</html>``. If either marker is missing,
    the fence-stripped text is returned as is.
    """
    cleaned = _FENCE.sub("", raw).strip()
    lowered = cleaned.lower()

    start = lowered.find("<!doctype html")
    if start == -1:
        start = lowered.find("<html")
    end = lowered.rfind(_DOCUMENT_END)
    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + len(_DOCUMENT_END)]
    return cleaned
