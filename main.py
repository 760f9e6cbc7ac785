# main.py
"""Cloud Functions source entry: the Firebase Python runtime loads the functions defined here."""

from gymtrack.functions import notify_new_predefined_routine  # noqa: F401
