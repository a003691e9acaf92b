"""Admissions action plans: task tracking, event log and D-Day countdowns."""
