"""Remediation advice for missing security headers, written by an LLM."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser

from .audit_logger import get_audit_logger

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

SYSTEM_PROMPT = (
    "You are a web security expert. Analyze missing HTTP security headers "
    "and provide concise advice."
)

USER_PROMPT_TEMPLATE = """Audit results for {url}:
Present headers: {present}
Missing headers: {missing}

Provide:
1. Short explanation of missing items.
2. Suggested values.
3. Likely breakage warnings.
Keep it concise and formatted as JSON with keys: "explanation", "suggestions", "warnings"."""

RESPONSE_FORMAT: Dict[str, str] = {"type": "json_object"}

_log = get_audit_logger()


def build_messages(
    target_url: str, headers_found: Dict[str, str], missing: Sequence[str]
) -> list:
    """Return the system + user message pair sent to the model."""
    prompt = USER_PROMPT_TEMPLATE.format(
        url=target_url,
        present=json.dumps(headers_found, separators=(",", ":")),
        missing=", ".join(missing),
    )
    return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]


class AdvisoryGenerator:
    """Ask a chat model for remediation advice on an audit result.

    The reply is parsed as JSON and returned as-is; whether it actually
    carries ``explanation``, ``suggestions`` and ``warnings`` is not
    checked.  Model and parse errors propagate to the caller.

    Parameters
    ----------
    model : BaseChatModel
        Any LangChain chat model.  ``response_format`` is passed through on
        each call to request JSON output.
    """

    def __init__(self, model: BaseChatModel) -> None:
        self._model = model
        self._parser = JsonOutputParser()

    def advise(
        self,
        target_url: str,
        headers_found: Dict[str, str],
        missing: Sequence[str],
        correlation_id: Optional[str] = None,
    ) -> Any:
        messages = build_messages(target_url, headers_found, missing)
        result = self._model.invoke(messages, response_format=RESPONSE_FORMAT)
        analysis = self._parser.parse(result.text)
        _log.advisory_generated(correlation_id, target_url)
        return analysis
