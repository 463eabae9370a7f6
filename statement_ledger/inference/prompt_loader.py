from pathlib import Path

from statement_ledger.inference.exceptions import InferenceError
from statement_ledger.ledger.models import DocumentKind

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

_PROMPT_FILES: dict[DocumentKind, str] = {
    DocumentKind.CREDIT_CARD: "credit_card_prompt.txt",
    DocumentKind.BANK_STATEMENT: "bank_statement_prompt.txt",
}


def load_prompt_template(kind: DocumentKind, path: Path | None = None) -> str:
    """Load the instruction template for a statement kind.

    Args:
        kind: Statement kind the instructions are for.
        path: Path to a template file. Defaults to the bundled one for *kind*.

    Returns:
        The raw template string with a ``{bill_hash}`` placeholder.

    Raises:
        InferenceError: if the file cannot be read.
    """
    if path is None:
        path = _DEFAULT_PROMPT_DIR / _PROMPT_FILES[kind]
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InferenceError(f"Failed to load prompt template: {exc}") from exc


def build_instructions(template: str, fingerprint: str) -> str:
    """Fill in the fingerprint the model must echo back as billHash."""
    return template.format(bill_hash=fingerprint)
