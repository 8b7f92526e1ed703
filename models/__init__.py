"""
Models package for Deadlock Avoidance Lab.
Contains the Banker's matrix state and the resource-allocation graph.
"""
