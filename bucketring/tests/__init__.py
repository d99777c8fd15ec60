"""
Tests Module: Unit and Concurrency Tests

Test Coverage:
    - Reader/writer lock (shared reads, exclusive writes, timeout, cancel)
    - Concurrent sorted map (predecessor, range scans)
    - Consistent hasher (placement, wraparound, removal protocol)
    - Distribution analyzer (sweeps, fairness)
    - Hash adapters, converters, configuration, logging, CLI
"""
