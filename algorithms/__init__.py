"""
Algorithms package for Deadlock Avoidance Lab.
Contains the Banker's safety check, safe-state recovery and cycle detection.
"""
