"""
Utilities package for Deadlock Avoidance Lab.
Contains scenario loading, settings, high scores and logging.
"""
