import pytest

from statement_ledger.config.settings import Settings
from statement_ledger.redaction.factory import RedactorFactory
from statement_ledger.redaction.redactor import Redactor


@pytest.fixture
def redactor() -> Redactor:
    return Redactor()


class TestRedactor:
    def test_empty_text(self, redactor: Redactor) -> None:
        result = redactor.redact("")
        assert result.redacted_text == ""
        assert result.artifacts == []

    def test_text_without_identifiers_is_unchanged(self, redactor: Redactor) -> None:
        result = redactor.redact("Coffee 120\nTaxi 250")
        assert result.redacted_text == "Coffee 120\nTaxi 250"
        assert result.artifacts == []

    def test_national_id(self, redactor: Redactor) -> None:
        result = redactor.redact("ID: A123456789 end")
        assert result.redacted_text == "ID: NATIONAL_ID_1 end"
        assert result.artifacts[0].original == "A123456789"

    def test_card_number_with_separators(self, redactor: Redactor) -> None:
        result = redactor.redact("Card 4111-1111-1111-1111 used")
        assert result.redacted_text == "Card CARD_NUMBER_1 used"

    def test_phone(self, redactor: Redactor) -> None:
        result = redactor.redact("Call 0912-345-678 now")
        assert result.redacted_text == "Call PHONE_1 now"

    def test_same_value_same_placeholder(self, redactor: Redactor) -> None:
        result = redactor.redact("0912345678 and 0912345678 and 0922333444")
        assert result.redacted_text == "PHONE_1 and PHONE_1 and PHONE_2"
        assert len(result.artifacts) == 3

    def test_full_width_digits_detected(self, redactor: Redactor) -> None:
        result = redactor.redact("Tel ０９１２３４５６７８")
        assert result.redacted_text == "Tel PHONE_1"
        assert result.artifacts[0].original == "０９１２３４５６７８"

    def test_full_width_separators_folded(self, redactor: Redactor) -> None:
        result = redactor.redact("卡號４１１１－１１１１－１１１１－１１１１止")
        assert result.redacted_text == "卡號CARD_NUMBER_1止"

    def test_han_text_left_alone(self, redactor: Redactor) -> None:
        assert redactor.redact("消費明細　台北").redacted_text == "消費明細　台北"


class TestRedactorFactory:
    def test_creates_redactor(self) -> None:
        assert isinstance(RedactorFactory.create(Settings()), Redactor)
