"""
Expense Tracker - Core Package

A personal expense tracker offered as an interactive terminal menu and
as a small web application, both working on the same JSON files.

DESIGN PRINCIPLES:
1. One shared core, two thin front ends
2. The files on disk are the single source of truth
3. Every operation is load → mutate → save
4. Categories and expenses never disagree
5. Fail visibly: corrupt files and unknown ids are errors, not empty results
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
