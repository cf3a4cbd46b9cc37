"""
WVC Domain Layer.

Entities, value objects, events and ports of the version control engine.
No infrastructure imports live here.
"""
