"""
Web interface module for the championship engine.

Provides a FastAPI-based admin server for:
- Registering and entering entrants
- Starting, ticking and resetting a championship
- Browsing matches, results and standings
"""
