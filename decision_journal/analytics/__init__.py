"""
Pure analytics over decisions and reflections.

Modules
-------
text_matcher      Resolve an AI recommendation text to one of the options.
confidence        50-95 confidence scores from pros/cons or values alignment.
activity          Decision streaks, per-day activity buckets, recent counts.
reflection_stats  Satisfaction aggregates and the improving/declining trend.
dashboard         Time-range filtered dashboard summary.
history           Search, filter and sort for the decision history view.

Nothing here touches the database or the network; every function takes
model lists and an optional reference time.
"""
