from pathlib import Path

import pytest

from statement_ledger.inference.exceptions import InferenceError
from statement_ledger.inference.prompt_loader import build_instructions, load_prompt_template
from statement_ledger.ledger.models import DocumentKind


class TestLoadPromptTemplate:
    @pytest.mark.parametrize("kind", list(DocumentKind))
    def test_bundled_templates_have_placeholder(self, kind: DocumentKind) -> None:
        template = load_prompt_template(kind)
        assert "{bill_hash}" in template

    def test_credit_card_template_mentions_rewards(self) -> None:
        assert "rewards" in load_prompt_template(DocumentKind.CREDIT_CARD)

    def test_bank_template_mentions_deposits(self) -> None:
        assert "deposits" in load_prompt_template(DocumentKind.BANK_STATEMENT)

    def test_custom_path(self, tmp_path: Path) -> None:
        path = tmp_path / "prompt.txt"
        path.write_text("hash={bill_hash}", encoding="utf-8")
        assert load_prompt_template(DocumentKind.CREDIT_CARD, path) == "hash={bill_hash}"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(InferenceError, match="Failed to load prompt template"):
            load_prompt_template(DocumentKind.CREDIT_CARD, tmp_path / "missing.txt")


class TestBuildInstructions:
    @pytest.mark.parametrize("kind", list(DocumentKind))
    def test_bundled_templates_format_cleanly(self, kind: DocumentKind) -> None:
        instructions = build_instructions(load_prompt_template(kind), "abc123")
        assert "abc123" in instructions
        assert "{bill_hash}" not in instructions
