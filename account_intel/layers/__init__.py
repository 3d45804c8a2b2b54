"""
Engine layers: reconciliation, intelligence, orchestration, persistence.
"""
