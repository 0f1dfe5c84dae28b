"""
Math submission grader: AI grading of handwritten math solutions.
"""

__version__ = "0.1.0"
