"""Event Attendance package.

Feature modules (attendance, reminders, points, streaks, events) each keep a
model, a repository protocol with its implementations, and a service. Flask
controllers stay thin and only translate HTTP to service calls.
"""
