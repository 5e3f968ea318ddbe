'''
Tutor Center Backend: the admin dashboard API for a small tutoring center.

The application itself lives in `main.py`; run it with
`uvicorn tutor_center_backend.main:app`.
'''
