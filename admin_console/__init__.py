"""EMS Admin Console — leave reconciliation and report export."""
