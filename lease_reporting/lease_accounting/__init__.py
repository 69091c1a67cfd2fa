"""
Lease accounting engine: payment schedules, present value, right-of-use asset
and lease liability tables, journals and balance summaries
"""
