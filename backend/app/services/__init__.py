# Services package init
"""
DocTrack Backend — Services Package
=====================================

Business logic, independent of HTTP:
    - validation.py:       request validator (pure)
    - student_service.py:  registry operations (register, list, mark ready, delete)
    - notifier.py:         SMTP email dispatch with categorised results
"""
