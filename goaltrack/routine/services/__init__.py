"""
Routine services: time windows, timeline, compliance calendar, persistence.
"""
