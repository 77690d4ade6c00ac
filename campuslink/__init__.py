"""
CampusLink
A campus companion backend: issue reporting, student profiles and mentorship.

Architecture:
- SQL database: Accounts (email, password hash, role)
- MongoDB: Documents (profiles, issues, mentor requests, chats, messages)
- Gemini AI: Moderation, issue triage and mentor scoring only
"""

__version__ = "1.0.0"
