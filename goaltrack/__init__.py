"""
Goal tracking application: routine scheduling and compliance tracking.
"""
