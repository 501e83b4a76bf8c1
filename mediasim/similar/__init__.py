"""
Similar-items engine.

Responsibilities:
- Select the candidate pool for a reference item (type, scope, exclusions).
- Look up the people credited on the reference and on related items.
- Score every candidate with weighted attribute overlap.
- Rank, threshold and cap the survivors, then project them for output.
"""
