import asyncio
from collections.abc import Awaitable, Callable

from statement_ledger.decryption.exceptions import PasswordEntryCancelledError
from statement_ledger.decryption.presets import PasswordPresets
from statement_ledger.logging.logger import Log
from statement_ledger.pdf.base import BasePdfCodec, PdfDocument
from statement_ledger.pdf.exceptions import PdfPasswordError

PasswordPrompt = Callable[[], Awaitable[str | None]]


class DecryptionResolver:
    """Opens a possibly encrypted document, escalating to the user when needed.

    Order of attempts: no password, every preset in order, then the prompt
    until it yields a working password or None (cancellation). Only
    PdfPasswordError is retried; any other codec error propagates at once.
    """

    def __init__(self, codec: BasePdfCodec, presets: PasswordPresets) -> None:
        self._codec = codec
        self._presets = presets

    async def open(self, pdf_bytes: bytes, prompt: PasswordPrompt) -> PdfDocument:
        candidates: list[str | None] = [None, *self._presets]
        for attempt, password in enumerate(candidates):
            try:
                document = await asyncio.to_thread(self._codec.open, pdf_bytes, password)
            except PdfPasswordError:
                continue
            if attempt:
                Log.info(f"Document unlocked with preset password #{attempt}")
            return document

        Log.info("No stored password works, asking the user")
        while True:
            password = await prompt()
            if password is None:
                raise PasswordEntryCancelledError("Password entry cancelled by user")
            try:
                return await asyncio.to_thread(self._codec.open, pdf_bytes, password)
            except PdfPasswordError:
                Log.warning("Entered password was rejected")
