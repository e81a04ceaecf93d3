"""Custom signals for the reconciliation app.

Signals:
    reconciliation_completed: Sent after a run and its matches are saved.
        Sender: The ``ReconciliationRun`` class.
        Kwargs:
            run: The ``ReconciliationRun`` instance.
            applied: Whether matched registrations were marked paid.
"""

from django.dispatch import Signal

reconciliation_completed = Signal()
