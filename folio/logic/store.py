import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple

from folio.logic.validator import parse_model
from folio.models.errors import FieldError
from folio.models.portfolio import ContactMessage, PortfolioRecord

logger = logging.getLogger(__name__)

Listener = Callable[[PortfolioRecord], None]


class RecordStore:
    """
    Holds the one active record of a session.

    `set` swaps the whole record and notifies listeners before it returns, so a
    reader either sees the old snapshot or the new one. Records are frozen, so
    no lock is needed. The store also keeps the visitor inbox, which is
    append-only and never part of the exported record.
    """

    def __init__(self, record: Optional[PortfolioRecord] = None):
        self._record = record
        self._listeners: List[Listener] = []
        self._messages: List[ContactMessage] = []

    def get(self) -> Optional[PortfolioRecord]:
        return self._record

    def set(self, record: PortfolioRecord) -> None:
        if not isinstance(record, PortfolioRecord):
            raise TypeError(f"RecordStore.set expects a PortfolioRecord, got {type(record).__name__}")
        self._record = record
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception:
                logger.exception("Record listener %r failed", listener)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def has_record(self) -> bool:
        return self._record is not None

    # --- Inbox ---

    @property
    def messages(self) -> Tuple[ContactMessage, ...]:
        return tuple(self._messages)

    def add_message(self, candidate: dict) -> Tuple[Optional[ContactMessage], List[FieldError]]:
        """Validates and appends one visitor message; missing dates are stamped with now (UTC)."""
        if isinstance(candidate, dict) and not candidate.get("date"):
            candidate = {**candidate, "date": datetime.now(timezone.utc).isoformat(timespec="seconds")}
        message, errors = parse_model(ContactMessage, candidate)
        if message is not None:
            self._messages.append(message)
            logger.info("Inbox: new message from %s", message.email)
        return message, errors
