"""
WVC Application Layer.

Services orchestrating the domain, and factories wiring infrastructure.
"""
