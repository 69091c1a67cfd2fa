"""
Lease reporting - AASB16 lease schedules, journals and balance reports
"""

__version__ = '1.0.0'
