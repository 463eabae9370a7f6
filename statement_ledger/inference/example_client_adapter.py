"""Example inference client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in AnalyzerFactory.
"""

import json
from typing import ClassVar

from statement_ledger.extraction.models import PayloadPart
from statement_ledger.inference.client_base import BaseInferenceClient


class ExampleClientAdapter(BaseInferenceClient):
    """Example adapter that returns a fixed, empty statement JSON.

    No network calls. The default reply satisfies both statement kinds, which
    makes it usable for local dry runs of the whole pipeline.
    """

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "bankName": "Example Bank",
        "billHash": None,
        "statementDate": None,
        "totalAmount": 0,
        "transactions": [],
        "rewards": [],
        "endingBalance": 0,
        "withdrawals": [],
        "deposits": [],
    }

    def __init__(self, response: dict[str, object] | None = None) -> None:
        self._response = response if response is not None else self.DEFAULT_RESPONSE

    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        parts: list[PayloadPart],
    ) -> str:
        _ = model, temperature, system_prompt, parts
        return json.dumps(self._response)
