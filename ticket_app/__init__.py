"""
Ticket App - Time-Gated Ticket Acquisition Engine

Automates acquiring scarce, time-gated ticket inventory against a remote
sales API: waits for the sale-open instant, fires paced purchase bursts,
and falls back to polling for returned stock.
"""

__version__ = "0.1.0"
__author__ = "Ticket App Team"
