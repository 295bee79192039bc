"""
Run state machine module.

Models the acquisition run lifecycle:
INIT → RESOLVING_* → DECIDING → COUNTING_DOWN | BUYING_NOW → ATTEMPTING
→ DONE | ESCALATING_TO_LEAKS → POLLING_LEAKS → TERMINAL.
"""
