"""Read models derived from ledger snapshots."""

from pocketledger.queries.views import LedgerQueries

__all__ = ["LedgerQueries"]
