"""
Daybook.

Dated journal notes: a FastAPI backend (daybook.backend) and a
command-line client (daybook.cli).
"""
