"""Database primitives - declarative Base and portable column types.

Invariants:
    - All models inherit from Base (db/base.py)
    - Timestamp columns use UTCDateTime so SQLite and PostgreSQL behave alike
"""
