"""Services - async orchestration of core rules around the interval store.

Invariants:
    - Services depend on IntervalStore (Protocol), never on SQLAlchemy directly
    - SessionController is the only writer of work intervals; ReportAggregator only reads
"""
