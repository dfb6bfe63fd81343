"""
Write paths that keep the derived caches consistent.

Modules
-------
decisions    DecisionJournal: save processed decisions, status, feedback.
reflections  ReflectionJournal: reflection CRUD with full stats recompute.
dashboard    Read-through dashboard cache.
"""
