"""
WVC Infrastructure Layer.

Concrete hash strategies, state stores, serialization, events and
notifiers behind the domain ports.
"""
