"""
Media library layer.

Responsibilities:
- Load the canonical item, people and user tables from disk.
- Parse free-text credits into the person role vocabulary at load time.
- Answer item, scope and people queries for the similar-items engine.
"""
