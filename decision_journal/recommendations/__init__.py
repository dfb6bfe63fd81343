"""
Recommendation pipeline: AI output to a UI-ready result.

Modules
-------
pipeline : build_result() + mark_selected(). Pure composition of the text
           matcher and the confidence scorer, no DB or I/O.
"""
