"""
Purchase module.

Error classification, burst pacing, the purchase burst itself, the sale
countdown, and inventory polling.
"""
