"""
Utility functions module.

Time Semantics:
- All instants are integer epoch milliseconds
- The sale-open instant comes from the catalog (or a configured override)
- Components never read the wall clock directly; they go through a clock
  object so countdowns and bursts can be driven deterministically
"""
