"""Narrative summaries of a customer's ledger from an OpenAI-style Responses API.

The HTTP call is a plain non-streaming POST made with :mod:`urllib`; it runs in
a worker thread so the event loop is not blocked. Any failure of the remote
service is logged and replaced with :data:`APOLOGY`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from collections.abc import Iterable
from typing import Any

from ab_ledger.config import AssistantConfig
from ab_ledger.exceptions import EntityNotFoundError, StorageUnavailableError
from ab_ledger.models import Customer, SummaryKind, Transaction, TransactionType
from ab_ledger.queries import LedgerQueries
from ab_ledger.serialization import as_number, serialize_value
from ab_ledger.store.base import NOT_FOUND, UNAVAILABLE

logger = logging.getLogger(__name__)

APOLOGY = "Sorry, I couldn't generate a summary at this time."

INSTRUCTIONS = (
    "You are a financial assistant specializing in summarizing customer payment activity.\n\n"
    "You will receive a transaction history and a summary type. Based on the summary type, "
    "you will generate a summary of the transaction history. The summary type is one of: "
    "latest (recent transactions), all (all transactions), or balance (balance amounts)."
)


def format_transactions_for_summary(transactions: Iterable[Transaction]) -> str:
    """Render transactions as one sentence per line, in stored order."""
    lines = []
    for t in transactions:
        verb = "paid" if t.type == TransactionType.CREDIT else "billed"
        lines.append(
            f"On {serialize_value(t.date)}, an amount of {as_number(t.amount)} was {verb} "
            f"via {serialize_value(t.mode)}. Notes: {t.notes or 'N/A'}"
        )
    return "\n".join(lines)


def build_prompt(transaction_history: str, kind: SummaryKind) -> str:
    return f"Transaction History: {transaction_history}\nSummary Type: {kind.value}\n\nSummary:"


def extract_text(body: Any) -> str:
    """Pull the generated text out of a Responses API body.

    Raises
    ------
    ValueError
        If the body is not a JSON object or carries no text output.
    """
    if not isinstance(body, dict):
        raise ValueError("Responses API returned a non-object body")
    text = body.get("output_text")
    if isinstance(text, str) and text.strip():
        return text.strip()

    parts = []
    output = body.get("output")
    for item in output if isinstance(output, list) else []:
        if not isinstance(item, dict) or item.get("type") != "message":
            continue
        content_items = item.get("content")
        for content in content_items if isinstance(content_items, list) else []:
            if isinstance(content, dict) and content.get("type") == "output_text":
                parts.append(str(content.get("text") or ""))
    text = "".join(parts).strip()
    if not text:
        raise ValueError("Responses API returned no text output")
    return text


class SummaryClient:
    """Thin client for the Responses endpoint named in :class:`AssistantConfig`."""

    def __init__(self, config: AssistantConfig | None = None) -> None:
        self.config = config or AssistantConfig()

    def post_responses(self, *, instructions: str, user_input: str) -> dict[str, Any]:
        """Execute a blocking Responses API call and return the parsed JSON body."""
        if not self.config.api_key:
            raise RuntimeError("OPENAI_API_KEY environment variable is required for summaries")

        payload = {
            "model": self.config.model,
            "instructions": instructions,
            "input": user_input,
        }
        data = json.dumps(payload).encode("utf-8")
        req = urllib.request.Request(self.config.api_url, data=data, method="POST")
        req.add_header("Authorization", f"Bearer {self.config.api_key}")
        req.add_header("Content-Type", "application/json")

        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            err_body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Summary API error: {e.code} {e.reason}: {err_body}") from e

        try:
            return json.loads(body.decode("utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError("Failed to parse JSON from the summary API") from e

    async def summarize(self, transaction_history: str, kind: SummaryKind) -> str:
        body = await asyncio.to_thread(
            self.post_responses,
            instructions=INSTRUCTIONS,
            user_input=build_prompt(transaction_history, kind),
        )
        return extract_text(body)


async def generate_summary(
    customer: Customer,
    kind: SummaryKind | str,
    client: SummaryClient | None = None,
) -> str:
    """Summarize a customer's ledger, or return :data:`APOLOGY` if the service fails."""
    client = client or SummaryClient()
    history = format_transactions_for_summary(customer.transactions)
    try:
        return await client.summarize(history, SummaryKind(kind))
    except (OSError, RuntimeError, ValueError) as e:
        logger.error("Summary generation failed for customer %s: %s", customer.id, e)
        return APOLOGY


async def summarize_customer(
    queries: LedgerQueries,
    customer_id: str,
    kind: SummaryKind | str,
    client: SummaryClient | None = None,
) -> str:
    """Look a customer up and summarize its ledger.

    Raises
    ------
    EntityNotFoundError
        If no customer has ``customer_id``.
    StorageUnavailableError
        If the store cannot be reached.
    """
    entry = await queries.get_customer_by_id(customer_id)
    if entry is NOT_FOUND:
        raise EntityNotFoundError("Customer not found")
    if entry is UNAVAILABLE:
        raise StorageUnavailableError("Customer store is unavailable")
    return await generate_summary(entry.customer, kind, client)
