"""
High-level use cases for the People API.

Services orchestrate repositories and hand routers/scripts explicit results
instead of repository exceptions.
"""
