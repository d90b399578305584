# talentmatch/privacy/gdpr.py
from __future__ import annotations
import os
import re
import json
import hashlib
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

# === ENV SWITCHES ==================================================
GDPR_MODE = (os.getenv("GDPR_MODE", "true").lower() in {"1","true","yes"})
REDACT_PHONE = True
REDACT_EMAIL = True
# ==================================================================

audit = logging.getLogger("talentmatch.privacy.audit")

_EMAIL_RE = re.compile(r"(?i)\b[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}\b")
_PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d[\d\s().-]{7,}\d)")

# free-text keys of a profile summary; the rest are short normalized labels
FREE_TEXT_KEYS = ("bio", "goals", "interests", "subjects")


def _token(label: str, value: str) -> str:
    # stable token (doesn't leak raw value)
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()[:10]
    return f"__{label.upper()}_{digest}__"


def find_pii(text: str) -> List[Tuple[str, str]]:
    """[(label, value)] for every email / phone-looking span in `text`."""
    found: List[Tuple[str, str]] = []
    if REDACT_EMAIL:
        found += [("EMAIL", m.group(0)) for m in _EMAIL_RE.finditer(text or "")]
    if REDACT_PHONE:
        for m in _PHONE_RE.finditer(text or ""):
            s = m.group(0).strip()
            # years, "2019-2023" ranges and short ids are not phone numbers
            if len(re.sub(r"\D+", "", s)) < 9:
                continue
            found.append(("PHONE", s))
    return found


def sanitize_text_for_llm(text: str) -> Tuple[str, Dict[str, str]]:
    """
    Returns (safe_text, token_map). Replaces found PII with deterministic tokens.
    token_map maps token -> original value (server-side only; never send it out).
    """
    if not GDPR_MODE:
        return text or "", {}

    safe = text or ""
    token_map: Dict[str, str] = {}
    # replace longest first so we don't double-replace substrings
    for label, val in sorted(set(find_pii(safe)), key=lambda x: -len(x[1])):
        tok = _token(label, val)
        safe = safe.replace(val, tok)
        token_map[tok] = val
    return safe, token_map


def redact_profile_summary(summary: Mapping[str, Any]) -> Tuple[Dict[str, Any], int]:
    """
    Copy of `summary` with PII tokenized in its free-text values (strings or
    lists of strings). Returns (safe_summary, n_redacted).
    """
    out: Dict[str, Any] = {}
    n = 0
    for k, v in summary.items():
        if k not in FREE_TEXT_KEYS:
            out[k] = v
            continue
        if isinstance(v, str):
            safe, tm = sanitize_text_for_llm(v)
            out[k], n = safe, n + len(tm)
        elif isinstance(v, (list, tuple)):
            items = []
            for it in v:
                safe, tm = sanitize_text_for_llm(str(it))
                items.append(safe)
                n += len(tm)
            out[k] = items
        else:
            out[k] = v
    return out, n


def minimal_log(event: str, subject_id: str, meta: Optional[dict] = None) -> None:
    """One JSON audit line per outbound data transfer (ids and counts only)."""
    audit.info(json.dumps({"event": event, "subject_id": subject_id, "meta": meta or {}}, ensure_ascii=False, sort_keys=True))
