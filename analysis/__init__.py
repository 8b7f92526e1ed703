"""
Analysis package for Deadlock Avoidance Lab.
Contains the game event log, session metrics and graph summaries.
"""
