# Routes package init
"""
DocTrack Backend — API Routes Package
=======================================

Route Inventory:
    - students.py:  POST   /add-student
                    GET    /students
                    POST   /mark-ready
                    DELETE /delete-student
    - health.py:    GET    /           (plain-text banner)
                    GET    /health     (service and database status)

Routes stay thin: read the body, call StudentService with the injected
session and notifier, shape the response.
"""
